"""
Notion integration-token persistence.

Kapture talks to Notion with an integration token. The token is entered
once via `python -m kapture setup` and serialized to JSON on disk:

    {
        "access_token": "secret_...",
        "workspace_name": "Home",
        "saved_at": "2025-03-01T09:00:00"
    }

Only the file on disk is read at runtime. If it is missing or holds no
token, NotAuthenticated is raised and the user is asked to re-run setup;
no re-authentication is attempted.
"""
import json
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from kapture.errors import NotAuthenticated

# ── Constants ─────────────────────────────────────────────────────────────────

TOKENS_DIR_DEFAULT = Path.home() / ".kapture" / "notion"
TOKEN_FILE_NAME = "token.json"


# ── Main class ────────────────────────────────────────────────────────────────

class TokenAuthenticator:
    """
    Manages the on-disk Notion token.

    Usage:
        auth = TokenAuthenticator()
        if not auth.has_token():
            auth.save_token("secret_...")
        token = auth.get_valid_token()   # → str
    """

    def __init__(self, tokens_dir: Path = TOKENS_DIR_DEFAULT):
        self._tokens_dir = Path(tokens_dir)
        self._token_file = self._tokens_dir / TOKEN_FILE_NAME

    @property
    def tokens_dir(self) -> Path:
        return self._tokens_dir

    # ── Persistence ───────────────────────────────────────────────────────────

    def has_token(self) -> bool:
        """Return True if a token file exists on disk."""
        return self._token_file.exists()

    def save(self, token_data: Dict[str, Any]) -> None:
        """
        Persist token_data to disk with owner-only permissions.

        Directory: 0700 (rwx------)
        File:      0600 (rw-------)
        """
        self._tokens_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self._tokens_dir, stat.S_IRWXU)  # 0700

        self._token_file.write_text(json.dumps(token_data, indent=2))
        os.chmod(self._token_file, stat.S_IRUSR | stat.S_IWUSR)  # 0600

    def save_token(self, access_token: str, workspace_name: Optional[str] = None) -> None:
        self.save({
            "access_token": access_token,
            "workspace_name": workspace_name,
            "saved_at": datetime.now(timezone.utc).isoformat(),
        })

    def load(self) -> Dict[str, Any]:
        """
        Load token_data from disk.

        Raises:
            NotAuthenticated: if no token file exists or it is unreadable.
        """
        if not self._token_file.exists():
            raise NotAuthenticated(
                f"No Notion token found at {self._token_file}. "
                "Run `python -m kapture setup` to connect your workspace."
            )
        try:
            return json.loads(self._token_file.read_text())
        except json.JSONDecodeError as exc:
            raise NotAuthenticated(
                f"Notion token file {self._token_file} is corrupt. "
                "Run `python -m kapture setup` again."
            ) from exc

    def clear(self) -> None:
        """Delete the token file (does not raise if already absent)."""
        if self._token_file.exists():
            self._token_file.unlink()

    # ── Auth ──────────────────────────────────────────────────────────────────

    def get_valid_token(self) -> str:
        """
        Return the saved bearer token.

        Raises:
            NotAuthenticated: if no usable token is saved.
        """
        token = self.load().get("access_token")
        if not token:
            raise NotAuthenticated(
                "Saved Notion token is empty. Run `python -m kapture setup`."
            )
        return token
