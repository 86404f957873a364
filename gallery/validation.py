"""
Request parameter validation for the gallery HTTP routes.

Errors are reported as express-validator style entries:
{'value': ..., 'msg': ..., 'param': ..., 'location': ...}
"""

from typing import List, Optional, Tuple

from .identifiers import is_valid_id

PAGE_SIZES = (10, 20, 30)
DEFAULT_PAGE_SIZE = 10
THUMB_SIZES = (50, 150, 250)
DEFAULT_THUMB_SIZE = 50

INVALID_VALUE = 'Invalid value'
NOT_FOUND = 'Not found'


def error_entry(value, param: str, location: str, msg: str = INVALID_VALUE) -> dict:
    return {'value': value, 'msg': msg, 'param': param, 'location': location}


def not_found(photo_id: str) -> dict:
    return {'errors': [error_entry(photo_id, 'id', 'params', NOT_FOUND)]}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value == ''


def parse_offset(value: Optional[str], errors: List[dict]) -> int:
    """Validate the 'from' query parameter, a non-negative integer."""
    if _is_blank(value):
        return 0
    if value.isascii() and value.isdigit():
        return int(value)
    errors.append(error_entry(value, 'from', 'query'))
    return 0


def parse_choice(
    value: Optional[str],
    param: str,
    choices: Tuple[int, ...],
    default: int,
    errors: List[dict]
) -> int:
    """Validate a query parameter restricted to a fixed set of integers."""
    if _is_blank(value):
        return default
    if value in {str(choice) for choice in choices}:
        return int(value)
    errors.append(error_entry(value, param, 'query'))
    return default


def check_id(value: str, errors: List[dict]) -> List[dict]:
    """Validate a photo id path parameter, returning errors."""
    if not is_valid_id(value):
        errors.append(error_entry(value, 'id', 'params'))
    return errors
