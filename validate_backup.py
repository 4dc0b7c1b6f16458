#!/usr/bin/env python3
"""Validate backup JSON files against the schema."""
import sys
from pathlib import Path

from fleet.backup import load_schema, parse_backup
from fleet.errors import BackupError


def validate_backup_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single backup file. Returns list of errors."""
    errors = []
    try:
        text = filepath.read_text(encoding="utf-8")
        parse_backup(text, schema)
    except OSError as e:
        errors.append(f"Read error: {e}")
    except BackupError as e:
        errors.append(str(e))
    return errors


def main(argv=None):
    """Validate every backup file given on the command line."""
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]
    if not paths:
        print("Usage: validate_backup.py BACKUP.json [BACKUP.json ...]")
        return 1

    schema = load_schema()
    all_valid = True
    for filepath in paths:
        if not filepath.exists():
            print(f"FAIL: {filepath.name}")
            print("  File not found")
            all_valid = False
            continue
        errors = validate_backup_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
