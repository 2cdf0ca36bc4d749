"""
Validation at the storage boundary.

Outgoing settings blobs and log records are checked against the JSON
schemas shipped in `shiftboard/schemas/`; user input is checked with the
pydantic models in `lib/inputs.py`. Both surface as ValidationError so
callers handle one type, and nothing is written when it is raised.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema
import pydantic
from jsonschema.exceptions import best_match

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"


class ValidationError(Exception):
    """Data or input was rejected before any write."""

    def __init__(self, schema_name: str, message: str, path: str | None = None):
        self.schema_name = schema_name
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"[{schema_name}] {message}{location}")


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> jsonschema.Draft7Validator:
    schema_file = SCHEMAS_DIR / f"{schema_name}.schema.json"
    try:
        schema = json.loads(schema_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ValidationError(schema_name, f"No schema at {schema_file}") from None
    return jsonschema.Draft7Validator(schema)


def validate(data: dict, schema_name: str) -> None:
    """Check `data` against the `<schema_name>.schema.json` schema.

    The most relevant error is reported (jsonschema's best_match).

    Raises:
        ValidationError: if `data` doesn't match
    """
    error = best_match(_validator(schema_name).iter_errors(data))
    if error is None:
        return
    path = "/".join(str(part) for part in error.absolute_path) or "(root)"
    raise ValidationError(schema_name, error.message, path)


def validate_before_write(data: dict, schema_name: str, target: str) -> None:
    """Like validate(), with the write target named in the message.

    Raises:
        ValidationError: `data` would not be accepted by `target`
    """
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(schema_name, f"not writing to {target}: {e}") from None


def parse_input(model: type[pydantic.BaseModel], **values) -> pydantic.BaseModel:
    """Build an input model, re-raising pydantic errors as ValidationError.

    Only the first error is reported; callers reject the whole input anyway.
    """
    try:
        return model(**values)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(model.__name__, first.get("msg", "invalid input"), path) from None
