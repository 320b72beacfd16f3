"""
Schema Validation - JSON Schema validation of declared resource attributes.

Each resource kind publishes a JSON Schema for its declared attributes.
Attributes are validated here, at the boundary, before they are mapped to
typed records.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator, SchemaError, ValidationError

logger = logging.getLogger(__name__)


def validate_kind_schema(schema: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate that a resource kind's schema is a valid JSON Schema.

    Args:
        schema: The schema to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        Draft7Validator.check_schema(schema)
        return True, None
    except SchemaError as e:
        return False, f"Invalid schema: {e.message}"


def validate_attributes(
    attributes: Dict[str, Any], schema: Dict[str, Any]
) -> Tuple[bool, Optional[str]]:
    """
    Validate declared attributes against a resource kind's schema.

    Args:
        attributes: The declared attributes to validate
        schema: The kind's JSON Schema

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        validator = Draft7Validator(schema)
        errors = list(validator.iter_errors(attributes))

        if not errors:
            return True, None

        # Collect all validation errors
        error_messages = []
        for error in errors:
            path = ".".join(str(p) for p in error.absolute_path) or "(root)"
            error_messages.append(f"{path}: {error.message}")

        return False, "; ".join(error_messages)

    except ValidationError as e:
        return False, f"Validation error: {e.message}"


def apply_defaults(
    attributes: Dict[str, Any], schema: Dict[str, Any]
) -> Dict[str, Any]:
    """Return a copy of attributes with schema defaults filled in."""
    result = dict(attributes)
    for name, prop in schema.get("properties", {}).items():
        if "default" in prop and result.get(name) in (None, ""):
            result[name] = prop["default"]
    return result
