"""
Visitor local access token (prefix ``AV~``).

Issued by a cell to a principal from another cell after it has been granted
roles locally. The token's authority is the issuing cell itself, so it has
no separate target.
"""

from dataclasses import dataclass
from typing import ClassVar, List, Tuple

from localtoken import config
from localtoken.roles import Role, as_role_tuple, decode_roles, encode_roles
from localtoken.token import CommonFields, ScopedToken, decode_scope, encode_scope


@dataclass(frozen=True)
class VisitorLocalAccessToken(ScopedToken):
    """
    Access token for a visiting principal.

    Extension fields: the encoded role list, then the scope list.

    Example:
        >>> token = VisitorLocalAccessToken(
        ...     issued_at=1700000000000,
        ...     lifespan=3600000,
        ...     issuer="https://cell.example/",
        ...     subject="user1",
        ...     roles=[Role("admin", "https://cell.example/__role/admin")],
        ... )
        >>> token.token_id
        'user1:1700000000000'
    """

    PREFIX: ClassVar[str] = "AV~"
    KIND: ClassVar[str] = "visitor_access"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ("roles", "scope")
    DEFAULT_LIFESPAN: ClassVar[int] = config.ACCESS_TOKEN_EXPIRES_MILLIS

    roles: Tuple[Role, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "roles", as_role_tuple(self.roles))

    def _extension_values(self) -> List[str]:
        return [encode_roles(self.roles), encode_scope(self.scope)]

    @classmethod
    def _from_fields(cls, common: CommonFields, ext: List[str]) -> "VisitorLocalAccessToken":
        return cls(
            issued_at=common.issued_at,
            lifespan=common.lifespan,
            issuer=common.issuer,
            subject=common.subject,
            schema=common.schema,
            roles=decode_roles(ext[0]),
            scope=decode_scope(ext[1]),
        )

    @property
    def role_list(self) -> List[Role]:
        return list(self.roles)
