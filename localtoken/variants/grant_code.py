"""Authorization grant code (prefix ``GC~``)."""

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple

from localtoken import config
from localtoken.roles import Role, as_role_tuple, decode_roles, encode_roles, validate_url
from localtoken.token import CommonFields, ScopedToken, decode_scope, encode_scope


@dataclass(frozen=True)
class GrantCode(ScopedToken):
    """
    Authorization code exchanged by a client for tokens.

    Extension fields: the target audience URL (empty if none), the encoded
    role list, then the scope list.
    """

    PREFIX: ClassVar[str] = "GC~"
    KIND: ClassVar[str] = "grant_code"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ("target", "roles", "scope")
    DEFAULT_LIFESPAN: ClassVar[int] = config.GRANT_CODE_EXPIRES_MILLIS

    target_url: Optional[str] = None
    roles: Tuple[Role, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "roles", as_role_tuple(self.roles))
        object.__setattr__(self, "target_url", self.target_url or None)
        if self.target_url:
            validate_url(self.target_url)

    def _extension_values(self) -> List[str]:
        return [self.target_url or "", encode_roles(self.roles), encode_scope(self.scope)]

    @classmethod
    def _from_fields(cls, common: CommonFields, ext: List[str]) -> "GrantCode":
        return cls(
            issued_at=common.issued_at,
            lifespan=common.lifespan,
            issuer=common.issuer,
            subject=common.subject,
            schema=common.schema,
            target_url=ext[0] or None,
            roles=decode_roles(ext[1]),
            scope=decode_scope(ext[2]),
        )

    @property
    def target(self) -> Optional[str]:
        return self.target_url

    @property
    def role_list(self) -> List[Role]:
        return list(self.roles)
