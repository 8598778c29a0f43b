"""
Interactive setup wizard for Kapture.

Prompts once for a Notion internal-integration token and saves it to
~/.kapture/notion/ with owner-only permissions (0700 dir / 0600 file).
The token is checked against the Notion API before it is saved.

Usage:
    python -m kapture setup
    python -m kapture.scripts.setup   (direct invocation)

Re-run any time the token is rotated or revoked.
"""
import asyncio
import getpass
import sys

from kapture.config import get_settings
from kapture.errors import NotAuthenticated, RemoteError
from kapture.notion.auth import TokenAuthenticator
from kapture.notion.client import NotionClient


class _FixedToken:
    def __init__(self, token: str):
        self._token = token

    def get_valid_token(self) -> str:
        return self._token


async def _verify(token: str) -> int:
    """Return how many databases the token can see."""
    settings = get_settings()
    client = NotionClient(
        _FixedToken(token),
        base_url=settings.notion_api_base_url,
        notion_version=settings.notion_version,
        timeout=settings.notion_timeout_seconds,
    )
    return len(await client.search_destinations())


def run_setup() -> None:
    auth = TokenAuthenticator(tokens_dir=get_settings().token_dir)

    print("\nKapture — Notion Setup\n")
    print(f"Your integration token will be stored in: {auth.tokens_dir}\n")

    if auth.has_token():
        print("An existing token was found.")
        overwrite = input("Replace it? [y/N] ").strip().lower()
        if overwrite != "y":
            print("Setup cancelled. Existing token unchanged.")
            sys.exit(0)

    token = getpass.getpass("Notion integration token: ").strip()
    if not token:
        print("Error: token cannot be empty.")
        sys.exit(1)

    print("\nChecking the token with Notion...")
    try:
        count = asyncio.run(_verify(token))
    except (NotAuthenticated, RemoteError) as exc:
        print(f"\nToken check failed: {exc}")
        print("Make sure the integration exists and the token was copied in full.")
        sys.exit(1)

    auth.save_token(token)
    print(f"\nToken saved to {auth.tokens_dir}")
    print(f"The integration can see {count} database(s).")
    print("Share more databases with the integration in Notion to capture into them.\n")


if __name__ == "__main__":
    run_setup()
