"""
Role list codec.

A role is a name bound to the URL of the cell-scoped role document that
defines it. A list of roles is packed into a single token field:

    <quoted-name>;<url> <quoted-name>;<url> ...

Names are percent-quoted so they can never contain the entry or name
separators; URLs are validated on both encode and decode.
"""

import urllib.parse
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from localtoken.errors import MalformedReferenceError

ENTRY_SEPARATOR = " "
NAME_SEPARATOR = ";"

ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class Role:
    """A named role reference."""

    name: str
    url: str

    @classmethod
    def from_url(cls, url: str) -> "Role":
        """
        Build a role whose name is the last path segment of its URL.

        Example:
            >>> Role.from_url("https://cell.example/__role/box1/admin")
            Role(name='admin', url='https://cell.example/__role/box1/admin')
        """
        validate_url(url)
        path = urllib.parse.urlsplit(url).path.rstrip("/")
        name = urllib.parse.unquote(path.rsplit("/", 1)[-1])
        if not name:
            raise MalformedReferenceError(f"Cannot derive a role name from {url!r}", url)
        return cls(name=name, url=url)


def validate_url(url: str) -> None:
    """
    Check that url is an absolute http(s) URL with a host.

    Raises:
        MalformedReferenceError: If the URL is not well formed.
    """
    if not url or any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        raise MalformedReferenceError(f"Malformed role URL: {url!r}", url)
    try:
        parts = urllib.parse.urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError as e:
        raise MalformedReferenceError(f"Malformed role URL: {url!r}", url) from e
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.hostname:
        raise MalformedReferenceError(f"Malformed role URL: {url!r}", url)


def as_role_tuple(roles: Optional[Iterable[Role]]) -> Tuple[Role, ...]:
    """Normalize a role sequence (or None) into a tuple, checking element types."""
    result = tuple(roles or ())
    for role in result:
        if not isinstance(role, Role):
            raise TypeError(f"Expected Role, got {type(role).__name__}")
    return result


def encode_roles(roles: Iterable[Role]) -> str:
    """Pack roles into one field, preserving order."""
    entries = []
    for role in roles:
        validate_url(role.url)
        entries.append(urllib.parse.quote(role.name, safe="") + NAME_SEPARATOR + role.url)
    return ENTRY_SEPARATOR.join(entries)


def decode_roles(field: str) -> List[Role]:
    """
    Unpack a role field produced by encode_roles().

    The whole list is rejected if any entry is malformed; an empty field
    decodes to an empty list.

    Raises:
        MalformedReferenceError: If any entry is malformed.
    """
    if field == "":
        return []

    roles = []
    for entry in field.split(ENTRY_SEPARATOR):
        name, sep, url = entry.partition(NAME_SEPARATOR)
        if not sep:
            raise MalformedReferenceError("Role entry is missing its name separator", entry)
        validate_url(url)
        roles.append(Role(name=urllib.parse.unquote(name), url=url))
    return roles
