"""
Token type dispatch.

Routes a raw token string to the variant whose prefix it carries. Prefixes
are checked in registration order and must be unambiguous: registering a
prefix that equals, or is a prefix of, an existing one fails immediately.
"""

import logging
import threading
from typing import Dict, List, Optional, Type

from localtoken.cipher import PayloadCipher
from localtoken.errors import UnrecognizedVariantError
from localtoken.token import LocalToken
from localtoken.variants import ALL_VARIANTS

logger = logging.getLogger(__name__)


class TokenRegistry:
    """
    Ordered registry of token variants keyed by prefix.

    Example:
        >>> registry = TokenRegistry.with_defaults()
        >>> registry.detect_variant("AV~...")
        <class 'localtoken.variants.visitor.VisitorLocalAccessToken'>
        >>> token = registry.parse(raw, "https://cell.example/", cipher)
    """

    def __init__(self, variants: Optional[List[Type[LocalToken]]] = None):
        self._variants: List[Type[LocalToken]] = []
        self._lock = threading.RLock()
        for variant in variants or []:
            self.register(variant)

    @classmethod
    def with_defaults(cls) -> "TokenRegistry":
        """Registry holding every built-in variant."""
        return cls(list(ALL_VARIANTS))

    def register(self, variant: Type[LocalToken]) -> None:
        """
        Add a variant at the lowest priority.

        Raises:
            ValueError: If the variant has no prefix or its prefix collides
                with a registered one.
        """
        prefix = variant.PREFIX
        if not prefix:
            raise ValueError(f"{variant.__name__} does not declare a PREFIX")

        with self._lock:
            for existing in self._variants:
                other = existing.PREFIX
                if prefix.startswith(other) or other.startswith(prefix):
                    raise ValueError(
                        f"Prefix {prefix!r} of {variant.__name__} collides with "
                        f"{other!r} of {existing.__name__}"
                    )
            self._variants.append(variant)
        logger.debug(f"Registered token variant {variant.__name__} ({prefix})")

    def detect_variant(self, token: str) -> Type[LocalToken]:
        """
        Return the variant whose prefix token carries.

        Raises:
            UnrecognizedVariantError: If no registered prefix matches.
        """
        if isinstance(token, str):
            with self._lock:
                for variant in self._variants:
                    if token.startswith(variant.PREFIX):
                        return variant
        raise UnrecognizedVariantError("Unrecognized token kind")

    def parse(self, token: str, issuer: str, cipher: PayloadCipher) -> LocalToken:
        """
        Parse token with the variant its prefix selects.

        A failure inside the selected variant propagates; no other variant
        is tried.
        """
        return self.detect_variant(token).parse(token, issuer, cipher)

    @property
    def prefixes(self) -> Dict[str, Type[LocalToken]]:
        with self._lock:
            return {variant.PREFIX: variant for variant in self._variants}

    def variant_for_kind(self, kind: str) -> Type[LocalToken]:
        """Look up a variant by its KIND name."""
        with self._lock:
            for variant in self._variants:
                if variant.KIND == kind:
                    return variant
        raise KeyError(kind)

    @property
    def variants(self) -> List[Type[LocalToken]]:
        with self._lock:
            return list(self._variants)


# Global registry instance
_default_registry: Optional[TokenRegistry] = None


def default_registry() -> TokenRegistry:
    """Get or create the registry of built-in variants."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TokenRegistry.with_defaults()
    return _default_registry


def detect_variant(token: str) -> Type[LocalToken]:
    """Detect a token's variant using the default registry."""
    return default_registry().detect_variant(token)


def parse_token(token: str, issuer: str, cipher: PayloadCipher) -> LocalToken:
    """Parse any built-in token kind using the default registry."""
    return default_registry().parse(token, issuer, cipher)
