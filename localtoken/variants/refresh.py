"""
Refresh tokens (prefixes ``RL~`` and ``RV~``).

A refresh token outlives the access token it was issued with and can mint a
fresh access token carrying the same subject, schema, roles and scope.
"""

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple

from localtoken import config
from localtoken.roles import Role, as_role_tuple, decode_roles, encode_roles, validate_url
from localtoken.token import CommonFields, ScopedToken, decode_scope, encode_scope, now_millis
from localtoken.variants.cell_local import CellLocalAccessToken
from localtoken.variants.visitor import VisitorLocalAccessToken


@dataclass(frozen=True)
class CellLocalRefreshToken(ScopedToken):
    """Refresh token for an account of the issuing cell. Extension fields: scope."""

    PREFIX: ClassVar[str] = "RL~"
    KIND: ClassVar[str] = "cell_local_refresh"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ("scope",)
    DEFAULT_LIFESPAN: ClassVar[int] = config.REFRESH_TOKEN_EXPIRES_MILLIS

    def _extension_values(self) -> List[str]:
        return [encode_scope(self.scope)]

    @classmethod
    def _from_fields(cls, common: CommonFields, ext: List[str]) -> "CellLocalRefreshToken":
        return cls(
            issued_at=common.issued_at,
            lifespan=common.lifespan,
            issuer=common.issuer,
            subject=common.subject,
            schema=common.schema,
            scope=decode_scope(ext[0]),
        )

    def refresh_access_token(
        self, issued_at: Optional[int] = None, lifespan: Optional[int] = None
    ) -> CellLocalAccessToken:
        """Mint a cell local access token for the same account."""
        return CellLocalAccessToken(
            issued_at=issued_at if issued_at is not None else now_millis(),
            lifespan=lifespan if lifespan is not None else CellLocalAccessToken.DEFAULT_LIFESPAN,
            issuer=self.issuer,
            subject=self.subject,
            schema=self.schema,
            scope=self.scope,
        )


@dataclass(frozen=True)
class VisitorRefreshToken(ScopedToken):
    """
    Refresh token for a visiting principal.

    Extension fields: the encoded role list, the original issuer (the cell
    the visitor's authority came from, empty if none), then the scope list.
    """

    PREFIX: ClassVar[str] = "RV~"
    KIND: ClassVar[str] = "visitor_refresh"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ("roles", "original_issuer", "scope")
    DEFAULT_LIFESPAN: ClassVar[int] = config.REFRESH_TOKEN_EXPIRES_MILLIS

    roles: Tuple[Role, ...] = ()
    original_issuer: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "roles", as_role_tuple(self.roles))
        object.__setattr__(self, "original_issuer", self.original_issuer or None)
        if self.original_issuer:
            validate_url(self.original_issuer)

    def _extension_values(self) -> List[str]:
        return [encode_roles(self.roles), self.original_issuer or "", encode_scope(self.scope)]

    @classmethod
    def _from_fields(cls, common: CommonFields, ext: List[str]) -> "VisitorRefreshToken":
        return cls(
            issued_at=common.issued_at,
            lifespan=common.lifespan,
            issuer=common.issuer,
            subject=common.subject,
            schema=common.schema,
            roles=decode_roles(ext[0]),
            original_issuer=ext[1] or None,
            scope=decode_scope(ext[2]),
        )

    @property
    def ext_cell_url(self) -> Optional[str]:
        return self.original_issuer or self.issuer

    @property
    def role_list(self) -> List[Role]:
        return list(self.roles)

    def refresh_access_token(
        self, issued_at: Optional[int] = None, lifespan: Optional[int] = None
    ) -> VisitorLocalAccessToken:
        """Mint a visitor access token carrying the same roles and scope."""
        return VisitorLocalAccessToken(
            issued_at=issued_at if issued_at is not None else now_millis(),
            lifespan=lifespan if lifespan is not None else VisitorLocalAccessToken.DEFAULT_LIFESPAN,
            issuer=self.issuer,
            subject=self.subject,
            schema=self.schema,
            roles=self.roles,
            scope=self.scope,
        )
