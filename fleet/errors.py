"""Exception hierarchy for the logbook."""


class FleetError(Exception):
    """Base class for every error the logbook reports to the user."""


class ValidationError(FleetError):
    """A form value was missing or out of range. Nothing was changed."""


class OdometerError(ValidationError):
    """An odometer reading is lower than the reading it must follow."""


class NotFoundError(FleetError):
    """The referenced tire, trip or expense does not exist."""


class LedgerError(FleetError):
    """A position-history operation would break the segment ordering."""


class RecordStoreError(FleetError):
    """Reading or writing the record store failed."""


class BackupError(FleetError):
    """A backup file could not be parsed or does not match the schema."""


class LocalStoreError(FleetError):
    """Reading or writing the local data file failed."""
