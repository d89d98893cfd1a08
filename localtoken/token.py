"""
Local token base protocol.

Every token variant shares the same wire layout:

    PREFIX + seal(issuer, rev(issued_at) \\t lifespan \\t subject \\t schema \\t issuer \\t ext_1 ... \\t ext_N)

The first five fields are common to all variants. The trailing extension
fields are opaque strings here; only the variant knows what they mean. A
variant subclass declares its PREFIX, the names of its EXTENSION_FIELDS and
its DEFAULT_LIFESPAN, and implements two hooks:

    _extension_values()       -> the variant's extension fields, in order
    _from_fields(common, ext) -> a complete token built from parsed fields

Parsing never checks expiry. Whether a token is still usable, and how much
clock skew to tolerate, is decided where the token is used.
"""

import time
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from localtoken.cipher import PayloadCipher
from localtoken.errors import (
    MalformedPrefixError,
    MalformedReferenceError,
    NumericFieldError,
    TokenParseError,
)
from localtoken.fields import (
    deserialize,
    obfuscate_timestamp,
    parse_non_negative_int,
    restore_timestamp,
    serialize,
)

COMMON_FIELD_COUNT = 5

IDX_ISSUED_AT = 0
IDX_LIFESPAN = 1
IDX_SUBJECT = 2
IDX_SCHEMA = 3
IDX_ISSUER = 4

SCOPE_SEPARATOR = " "

T = TypeVar("T", bound="LocalToken")


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CommonFields:
    """The five fields every local token carries."""

    issued_at: int
    lifespan: int
    subject: Optional[str]
    schema: Optional[str]
    issuer: str


def build_token_string(
    prefix: str,
    common: CommonFields,
    extension_fields: Sequence[str],
    cipher: PayloadCipher,
) -> str:
    """Serialize and seal a token payload, then prepend the variant prefix."""
    payload = serialize(
        [
            obfuscate_timestamp(common.issued_at),
            str(common.lifespan),
            common.subject or "",
            common.schema or "",
            common.issuer,
            *extension_fields,
        ]
    )
    return prefix + cipher.encrypt(common.issuer, payload)


def parse_common(
    body: str,
    expected_issuer: str,
    extension_count: int,
    cipher: PayloadCipher,
) -> Tuple[CommonFields, List[str]]:
    """
    Open a token body and split it into common and extension fields.

    Args:
        body: The token string with its prefix removed.
        expected_issuer: Issuer whose key the body must decrypt under.
        extension_count: Number of extension fields the variant declares.
        cipher: Cipher used to open the body.

    Returns:
        The parsed common fields and the raw extension fields.

    Raises:
        DecryptError: If the body does not decrypt under the issuer's key.
        FieldCountError: If the payload has the wrong number of fields.
        NumericFieldError: If issued_at or lifespan is not a valid integer.
    """
    fields = deserialize(cipher.decrypt(expected_issuer, body), COMMON_FIELD_COUNT + extension_count)

    issued_at = restore_timestamp(fields[IDX_ISSUED_AT])
    lifespan = parse_non_negative_int(fields[IDX_LIFESPAN], "lifespan")
    if lifespan == 0:
        raise NumericFieldError("lifespan")

    common = CommonFields(
        issued_at=issued_at,
        lifespan=lifespan,
        subject=fields[IDX_SUBJECT] or None,
        schema=fields[IDX_SCHEMA] or None,
        issuer=fields[IDX_ISSUER],
    )
    return common, fields[COMMON_FIELD_COUNT:]


def encode_scope(scope: Sequence[str]) -> str:
    return SCOPE_SEPARATOR.join(scope)


def decode_scope(field: str) -> Tuple[str, ...]:
    if not field:
        return ()
    return tuple(field.split(SCOPE_SEPARATOR))


def _validate_scope(scope: Sequence[str]) -> None:
    for item in scope:
        if not item or any(ch.isspace() for ch in item):
            raise ValueError(f"Invalid scope value: {item!r}")


@dataclass(frozen=True)
class LocalToken:
    """
    Abstract base for all local token variants.

    Attributes:
        issued_at: Issue time in epoch milliseconds
        lifespan: Validity period in milliseconds
        issuer: URL of the issuing cell (also the key lookup identity)
        subject: Principal the token was issued to
        schema: Client/application the token was issued through
    """

    PREFIX: ClassVar[str] = ""
    KIND: ClassVar[str] = ""
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ()
    DEFAULT_LIFESPAN: ClassVar[int] = 0

    issued_at: int
    lifespan: int
    issuer: str
    subject: Optional[str] = None
    schema: Optional[str] = None

    def __post_init__(self):
        # Absent and empty encode the same way on the wire.
        object.__setattr__(self, "subject", self.subject or None)
        object.__setattr__(self, "schema", self.schema or None)
        if self.issued_at < 0:
            raise ValueError("issued_at must be >= 0")
        if self.lifespan <= 0:
            raise ValueError("lifespan must be > 0")
        if not self.issuer:
            raise ValueError("issuer is required")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def with_default_lifespan(cls: Type[T], issued_at: int, issuer: str, **kwargs: Any) -> T:
        """Build a token that expires after the variant's default lifespan."""
        return cls(issued_at=issued_at, lifespan=cls.DEFAULT_LIFESPAN, issuer=issuer, **kwargs)

    @classmethod
    def issue(cls: Type[T], issuer: str, lifespan: Optional[int] = None, **kwargs: Any) -> T:
        """Build a token issued now."""
        return cls(
            issued_at=now_millis(),
            lifespan=lifespan if lifespan is not None else cls.DEFAULT_LIFESPAN,
            issuer=issuer,
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    @property
    def common_fields(self) -> CommonFields:
        return CommonFields(
            issued_at=self.issued_at,
            lifespan=self.lifespan,
            subject=self.subject,
            schema=self.schema,
            issuer=self.issuer,
        )

    def to_token_string(self, cipher: PayloadCipher) -> str:
        """Encode and seal this token."""
        return build_token_string(self.PREFIX, self.common_fields, self._extension_values(), cipher)

    def _extension_values(self) -> List[str]:
        return []

    @classmethod
    def parse(cls: Type[T], token: str, issuer: str, cipher: PayloadCipher) -> T:
        """
        Parse a token string as a token of this variant issued by issuer.

        The prefix is checked before any key is resolved.

        Raises:
            MalformedPrefixError: If the token does not carry this variant's prefix.
            TokenParseError: For any other decoding failure.
        """
        if not isinstance(token, str) or not token.startswith(cls.PREFIX):
            raise MalformedPrefixError(f"Token is not a {cls.__name__}")
        if not issuer:
            raise TokenParseError("Issuer is required to parse a token")

        common, ext = parse_common(token[len(cls.PREFIX):], issuer, len(cls.EXTENSION_FIELDS), cipher)
        try:
            return cls._from_fields(common, ext)
        except MalformedReferenceError as e:
            raise TokenParseError(f"Invalid role list: {e}") from e
        except ValueError as e:
            raise TokenParseError(f"Invalid {cls.__name__} fields") from e

    @classmethod
    def _from_fields(cls: Type[T], common: CommonFields, ext: List[str]) -> T:
        return cls(
            issued_at=common.issued_at,
            lifespan=common.lifespan,
            issuer=common.issuer,
            subject=common.subject,
            schema=common.schema,
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def token_id(self) -> str:
        """
        Identity of this issuance: unique per subject and issue instant.

        A token without a subject yields ":<issued_at>", never "null:<issued_at>".
        """
        return f"{self.subject or ''}:{self.issued_at}"

    @property
    def target(self) -> Optional[str]:
        """Audience the token is meant for, if other than the issuer."""
        return None

    @property
    def ext_cell_url(self) -> Optional[str]:
        """URL of the cell whose authority this token originates from."""
        return self.issuer

    @property
    def expires_at(self) -> int:
        return self.issued_at + self.lifespan

    def is_expired(self, now: Optional[int] = None, skew_millis: int = 0) -> bool:
        """
        Check expiry against now (epoch millis, defaults to the current time).

        A token is still accepted up to skew_millis after expires_at.
        """
        current = now if now is not None else now_millis()
        return current >= self.expires_at + skew_millis

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["kind"] = self.KIND
        data["prefix"] = self.PREFIX
        data["token_id"] = self.token_id
        data["expires_at"] = self.expires_at
        return data


@dataclass(frozen=True)
class ScopedToken(LocalToken):
    """A token carrying an OAuth scope list."""

    scope: Tuple[str, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "scope", tuple(self.scope or ()))
        _validate_scope(self.scope)
