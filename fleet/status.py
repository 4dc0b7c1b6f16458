"""Status enum for maintenance urgency levels."""

from enum import Enum


class Status(Enum):
    """Service status categories. Lower value = more urgent."""

    OVERDUE = 1
    DUE_SOON = 2
    OK = 3
    UNKNOWN = 4  # Nothing installed yet, usage can't be measured
