"""
localtoken Command Line Interface.

Provides commands for generating a secret, issuing tokens and inspecting them.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

from localtoken import config
from localtoken.cipher import PayloadCipher
from localtoken.dispatch import default_registry
from localtoken.errors import LocalTokenError
from localtoken.keys import StaticKeyResolver, generate_secret
from localtoken.metrics import get_metrics
from localtoken.roles import Role
from localtoken.verifier import TokenVerifier


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _load_cipher(args: argparse.Namespace) -> Optional[PayloadCipher]:
    secret = args.secret or os.environ.get(config.SECRET_ENV_VAR)
    if not secret:
        print(
            f"Error: Missing secret. Set {config.SECRET_ENV_VAR} or use --secret",
            file=sys.stderr,
        )
        return None
    try:
        return PayloadCipher(StaticKeyResolver.from_jwk(secret))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def cmd_init(args: argparse.Namespace) -> int:
    """Generate a new master secret."""
    secret = generate_secret()
    if args.env:
        print(f"export {config.SECRET_ENV_VAR}='{secret}'")
    else:
        print("--- SECRET (Keep Secret / Set as Env Var) ---")
        print(secret)
    return 0


def cmd_issue(args: argparse.Namespace) -> int:
    """Issue a token of the requested kind."""
    cipher = _load_cipher(args)
    if cipher is None:
        return 1

    variant = default_registry().variant_for_kind(args.kind)
    ext = variant.EXTENSION_FIELDS
    kwargs: Dict[str, Any] = {"subject": args.subject, "schema": args.schema}

    try:
        if args.role:
            if "roles" not in ext:
                print(f"Error: {args.kind} tokens do not carry roles", file=sys.stderr)
                return 1
            kwargs["roles"] = [Role.from_url(url) for url in args.role]
        if args.scope:
            if "scope" not in ext:
                print(f"Error: {args.kind} tokens do not carry a scope", file=sys.stderr)
                return 1
            kwargs["scope"] = args.scope
        if args.target:
            if "target" not in ext:
                print(f"Error: {args.kind} tokens do not carry a target", file=sys.stderr)
                return 1
            kwargs["target_url"] = args.target
        if args.original_issuer:
            if "original_issuer" not in ext:
                print(f"Error: {args.kind} tokens do not carry an original issuer", file=sys.stderr)
                return 1
            kwargs["original_issuer"] = args.original_issuer

        if args.issued_at is not None:
            token = variant(
                issued_at=args.issued_at,
                lifespan=args.lifespan if args.lifespan is not None else variant.DEFAULT_LIFESPAN,
                issuer=args.issuer,
                **kwargs,
            )
        else:
            token = variant.issue(args.issuer, lifespan=args.lifespan, **kwargs)

        print(token.to_token_string(cipher))
        get_metrics().record_issued(token.PREFIX)
        return 0

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except LocalTokenError as e:
        print(f"Error issuing token: {e}", file=sys.stderr)
        return 1


def cmd_inspect(args: argparse.Namespace) -> int:
    """Decode a token and report whether it is currently valid."""
    cipher = _load_cipher(args)
    if cipher is None:
        return 1

    try:
        verifier = TokenVerifier(cipher, clock_skew_millis=args.skew, metrics=get_metrics())
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    result = verifier.verify(args.token, args.issuer)

    if args.json:
        output: Dict[str, Any] = {"valid": result.valid, "reason": result.reason}
        if result.token is not None:
            output["token"] = result.token.to_dict()
        print(json.dumps(output, indent=2))
    elif result.token is not None:
        print("✅ VALID" if result.valid else f"❌ INVALID ({result.reason})")
        print(f"   Kind:    {result.token.KIND}")
        print(f"   Subject: {result.token.subject}")
        print(f"   Issuer:  {result.token.issuer}")
        print(f"   Expires: {result.token.expires_at}")
    else:
        print(f"❌ INVALID ({result.reason})")

    return 0 if result.valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localtoken",
        description="localtoken CLI - issue and inspect self-contained cell tokens",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    p_init = subparsers.add_parser("init", help="Generate a new master secret")
    p_init.add_argument("--env", action="store_true", help="Output as environment variable")

    # issue command
    kinds = [variant.KIND for variant in default_registry().variants]
    p_issue = subparsers.add_parser("issue", help="Issue a token")
    p_issue.add_argument("kind", choices=kinds, help="Token kind")
    p_issue.add_argument("--issuer", required=True, help="Issuer (cell) URL")
    p_issue.add_argument("--subject", help="Subject the token is issued to")
    p_issue.add_argument("--schema", help="Client/application identifier")
    p_issue.add_argument("--role", action="append", help="Role URL (repeatable)")
    p_issue.add_argument("--scope", action="append", help="Scope value (repeatable)")
    p_issue.add_argument("--target", help="Target audience URL (grant codes)")
    p_issue.add_argument("--original-issuer", help="Original issuer URL (visitor refresh tokens)")
    p_issue.add_argument("--lifespan", type=int, help="Lifespan in milliseconds")
    p_issue.add_argument("--issued-at", type=int, help="Issue time in epoch milliseconds")
    p_issue.add_argument("--secret", help="Master secret (oct JWK JSON)")

    # inspect command
    p_inspect = subparsers.add_parser("inspect", help="Decode and check a token")
    p_inspect.add_argument("token", help="The token to inspect")
    p_inspect.add_argument("--issuer", required=True, help="Expected issuer URL")
    p_inspect.add_argument("--skew", type=int, default=config.CLOCK_SKEW_MILLIS, help="Clock skew in ms")
    p_inspect.add_argument("--json", action="store_true", help="Output as JSON")
    p_inspect.add_argument("--secret", help="Master secret (oct JWK JSON)")

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == "init":
        return cmd_init(args)
    elif args.command == "issue":
        return cmd_issue(args)
    elif args.command == "inspect":
        return cmd_inspect(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
