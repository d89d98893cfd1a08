"""
Field serializer for local token payloads.

A payload is an ordered list of string fields joined by a tab. The tab is
reserved: no field value may contain it, which keeps splitting unambiguous.
"""

import re
from typing import List, Sequence

from localtoken.errors import FieldCountError, FieldValueError, NumericFieldError

DELIMITER = "\t"

_DIGITS = re.compile(r"[0-9]+")


def serialize(fields: Sequence[str]) -> str:
    """
    Join fields into a single delimited payload.

    Raises:
        FieldValueError: If a field contains the delimiter.
    """
    for index, value in enumerate(fields):
        if DELIMITER in value:
            raise FieldValueError(f"Field {index} contains the reserved delimiter")
    return DELIMITER.join(fields)


def deserialize(payload: str, expected_count: int) -> List[str]:
    """
    Split a payload back into fields.

    Raises:
        FieldCountError: If the payload does not hold exactly expected_count fields.
    """
    fields = payload.split(DELIMITER)
    if len(fields) != expected_count:
        raise FieldCountError(expected_count, len(fields))
    return fields


def parse_non_negative_int(value: str, field_name: str) -> int:
    """Parse a plain decimal integer, rejecting signs, spaces and empty strings."""
    if not _DIGITS.fullmatch(value):
        raise NumericFieldError(field_name)
    return int(value)


def obfuscate_timestamp(issued_at: int) -> str:
    """Reverse the decimal digits of a timestamp."""
    return str(issued_at)[::-1]


def restore_timestamp(value: str) -> int:
    """Undo obfuscate_timestamp()."""
    return parse_non_negative_int(value[::-1], "issued_at")
