# services/validation.py
from typing import Any, Mapping

from pydantic import ValidationError

from contest_hub.db.schemas.contest import ContestRecord
from contest_hub.errors import BadRequestError


def _describe(error: Mapping[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ())) or "record"
    kind = error.get("type")
    ctx = error.get("ctx") or {}

    if kind == "greater_than":
        bound = ctx.get("gt")
        return f"{field} must be greater than {'zero' if bound == 0 else bound}"
    if kind == "greater_than_equal":
        return f"{field} must not be less than {ctx.get('ge')}"
    if kind == "less_than_equal":
        return f"{field} must not be greater than {ctx.get('le')}"
    if kind == "string_too_short":
        return f"{field} must be longer than or equal to {ctx.get('min_length')} characters"
    if kind == "string_too_long":
        return f"{field} must be shorter than or equal to {ctx.get('max_length')} characters"
    if kind == "missing":
        return f"{field} is required"
    if kind in ("int_type", "int_parsing", "int_from_float"):
        return f"{field} must be an integer number"
    if kind == "string_type":
        return f"{field} must be a string"
    if kind == "bool_type":
        return f"{field} must be a boolean value"
    return f"{field}: {error.get('msg', 'invalid value')}"


def validate_contest(candidate: Mapping[str, Any]) -> ContestRecord:
    """
    Check a fully-constructed contest against the column rules.

    Returns the validated record. On failure raises BadRequestError carrying
    the message of the first violated rule.
    """
    try:
        return ContestRecord.model_validate(dict(candidate))
    except ValidationError as exc:
        errors = exc.errors()
        raise BadRequestError(_describe(errors[0])) from exc
