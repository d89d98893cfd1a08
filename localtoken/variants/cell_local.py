"""Cell local access token (prefix ``AL~``)."""

from dataclasses import dataclass
from typing import ClassVar, List, Tuple

from localtoken import config
from localtoken.token import CommonFields, ScopedToken, decode_scope, encode_scope


@dataclass(frozen=True)
class CellLocalAccessToken(ScopedToken):
    """
    Access token for an account authenticated by the issuing cell itself.

    Extension fields: the scope list.
    """

    PREFIX: ClassVar[str] = "AL~"
    KIND: ClassVar[str] = "cell_local_access"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ("scope",)
    DEFAULT_LIFESPAN: ClassVar[int] = config.ACCESS_TOKEN_EXPIRES_MILLIS

    def _extension_values(self) -> List[str]:
        return [encode_scope(self.scope)]

    @classmethod
    def _from_fields(cls, common: CommonFields, ext: List[str]) -> "CellLocalAccessToken":
        return cls(
            issued_at=common.issued_at,
            lifespan=common.lifespan,
            issuer=common.issuer,
            subject=common.subject,
            schema=common.schema,
            scope=decode_scope(ext[0]),
        )
