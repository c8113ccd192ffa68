"""Validate fleet table files against the bundled JSON schemas."""

from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from jsonschema import ValidationError, validate

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


def load_schema(table: str) -> dict:
    """Load the JSON schema of one table from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        schemas = yaml.safe_load(f)
    if table not in schemas or table.startswith("$"):
        raise KeyError(f"No schema for table {table!r}")
    schema = dict(schemas[table])
    # Shared definitions are referenced as #/$defs/...
    schema["$defs"] = schemas["$defs"]
    return schema


def _dates_to_text(value: Any) -> Any:
    """YAML reads unquoted dates as date objects; the schema expects text."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _dates_to_text(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_dates_to_text(v) for v in value]
    return value


def validate_table_file(filepath: Union[str, Path], schema: Dict[str, Any]) -> List[str]:
    """Validate a single table file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=_dates_to_text(data), schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors
