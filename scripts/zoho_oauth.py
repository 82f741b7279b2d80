"""Manual Zoho authorization helpers.

The relay only ever uses a refresh token; this tool obtains one.

    # 1. Print the consent URL and open it in a browser.
    python -m scripts.zoho_oauth --redirect-uri https://example.com/zoho/callback auth-url

    # 2. Exchange the ``code`` Zoho redirected with (valid for ~2 minutes).
    python -m scripts.zoho_oauth --redirect-uri https://example.com/zoho/callback exchange 1000.abc123...

Client id, secret and region are read from the same environment as the relay.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from lead_relay.clients.zoho_auth import AuthProviderError, ZohoOAuthClient
from lead_relay.core.config import (
    DEFAULT_REGION,
    REGION_DOMAINS,
    HTTPSettings,
    _load_env_file,
)

EXIT_OK = 0
EXIT_USAGE_ERROR = 2
EXIT_EXCHANGE_ERROR = 4


def _accounts_domain(region: str | None) -> str:
    override = os.environ.get("ZOHO_ACCOUNTS_DOMAIN")
    if override:
        return override.rstrip("/")
    code = (region or os.environ.get("ZOHO_REGION") or DEFAULT_REGION).strip().lower()
    if code not in REGION_DOMAINS:
        raise ValueError(f"Unknown Zoho region {code!r}")
    return REGION_DOMAINS[code][0]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Obtain a Zoho refresh token.")
    parser.add_argument("--region", default=None, help="Zoho region (default: ZOHO_REGION or com).")
    parser.add_argument(
        "--redirect-uri",
        default=None,
        help="Redirect URI registered in the Zoho API console (default: ZOHO_REDIRECT_URI).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    url_parser = subparsers.add_parser("auth-url", help="Print the consent URL.")
    url_parser.add_argument(
        "--scope",
        default=None,
        help="OAuth scope (default: ZOHO_SCOPE or ZohoCRM.modules.ALL).",
    )

    exchange_parser = subparsers.add_parser(
        "exchange", help="Exchange an authorization code for a refresh token."
    )
    exchange_parser.add_argument("code", help="Authorization code from the redirect.")

    return parser


async def _exchange(client: ZohoOAuthClient, accounts: str, code: str, redirect_uri: str) -> int:
    try:
        grant = await client.exchange_authorization_code(
            accounts_domain=accounts,
            client_id=os.environ["ZOHO_CLIENT_ID"],
            client_secret=os.environ["ZOHO_CLIENT_SECRET"],
            code=code,
            redirect_uri=redirect_uri,
        )
    except AuthProviderError as exc:
        print(f"Exchange failed (HTTP {exc.status_code}): {exc.body}", file=sys.stderr)
        return EXIT_EXCHANGE_ERROR

    if not grant.refresh_token:
        print(
            "Zoho answered without a refresh token; re-run auth-url and make sure "
            "consent is granted with offline access.",
            file=sys.stderr,
        )
        return EXIT_EXCHANGE_ERROR

    print(f"ZOHO_REFRESH_TOKEN={grant.refresh_token}")
    print(f"expires_in={grant.expires_in} api_domain={grant.api_domain} scope={grant.scope}")
    return EXIT_OK


def main(argv: list[str] | None = None, *, client: ZohoOAuthClient | None = None) -> int:
    _load_env_file()
    args = _build_parser().parse_args(argv)

    required = ["ZOHO_CLIENT_ID"] + (["ZOHO_CLIENT_SECRET"] if args.command == "exchange" else [])
    missing = [key for key in required if not os.environ.get(key)]
    if missing:
        print(f"Missing environment variables: {', '.join(missing)}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    redirect_uri = args.redirect_uri or os.environ.get("ZOHO_REDIRECT_URI")
    if not redirect_uri:
        print("A redirect URI is required (--redirect-uri or ZOHO_REDIRECT_URI).", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        accounts = _accounts_domain(args.region)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE_ERROR

    client = client or ZohoOAuthClient(HTTPSettings())

    if args.command == "auth-url":
        scope = args.scope or os.environ.get("ZOHO_SCOPE") or "ZohoCRM.modules.ALL"
        print(
            client.build_authorization_url(
                accounts_domain=accounts,
                client_id=os.environ["ZOHO_CLIENT_ID"],
                redirect_uri=redirect_uri,
                scope=scope,
            )
        )
        return EXIT_OK

    return asyncio.run(_exchange(client, accounts, args.code, redirect_uri))


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
