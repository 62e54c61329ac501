#!/usr/bin/env python3
"""Validate alert configuration YAML files against the schema."""
import sys
from pathlib import Path

import yaml

from alerting.config import load_schema, validate_config


def validate_config_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single configuration file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        errors.extend(validate_config(data or {}, schema))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate each configuration file given on the command line."""
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]
    if not paths:
        print("Usage: validate_config.py CONFIG.yaml [CONFIG.yaml ...]")
        return 1

    schema = load_schema()
    all_valid = True
    for filepath in paths:
        errors = validate_config_file(filepath, schema)
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
