"""
Garmin Connect token persistence.

garminconnect 0.2.x authenticates through garth, which exchanges the
account email/password for OAuth1/OAuth2 tokens. garth can dump those tokens
to a directory and later resume from them, so the plaintext password is only
needed once, during `python -m p2g setup`.

When the saved tokens can no longer be refreshed we raise
SessionExpiredError and the user re-runs setup.
"""
import os
import stat
from pathlib import Path

import garminconnect

# ── Constants ─────────────────────────────────────────────────────────────────

TOKENS_DIR_DEFAULT = Path.home() / ".p2g" / "garmin_session"
TOKEN_FILE_NAMES = ("oauth1_token.json", "oauth2_token.json")


# ── Exceptions ────────────────────────────────────────────────────────────────

class NoSessionError(RuntimeError):
    """Raised when no saved tokens exist on disk."""


class SessionExpiredError(RuntimeError):
    """Raised when saved tokens are rejected by Garmin's servers."""


# ── Main class ────────────────────────────────────────────────────────────────

class GarminAuth:
    """
    Manages the on-disk Garmin token store.

    Usage:
        auth = GarminAuth(settings.garmin_tokens_dir)
        if not auth.has_session():
            auth.authenticate_and_save(email, password)
        api = auth.build_client()   # → garminconnect.Garmin instance
    """

    def __init__(self, tokens_dir: Path = TOKENS_DIR_DEFAULT):
        self.tokens_dir = Path(tokens_dir)

    def has_session(self) -> bool:
        """Return True if both garth token files exist."""
        return all((self.tokens_dir / name).exists() for name in TOKEN_FILE_NAMES)

    def clear(self) -> None:
        """Delete saved tokens (does not raise if already absent)."""
        for name in TOKEN_FILE_NAMES:
            (self.tokens_dir / name).unlink(missing_ok=True)

    def authenticate_and_save(self, email: str, password: str) -> garminconnect.Garmin:
        """
        Log in with email + password and dump the resulting tokens to disk.

        Directory: 0700 (rwx------)
        Files:     0600 (rw-------)

        Raises:
            Any exception from garminconnect on auth failure.
        """
        api = garminconnect.Garmin(email, password)
        api.login()  # raises on bad credentials

        self.tokens_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self.tokens_dir, stat.S_IRWXU)
        api.garth.dump(str(self.tokens_dir))
        for name in TOKEN_FILE_NAMES:
            token_file = self.tokens_dir / name
            if token_file.exists():
                os.chmod(token_file, stat.S_IRUSR | stat.S_IWUSR)
        return api

    def build_client(self) -> garminconnect.Garmin:
        """
        Build an authenticated Garmin client from the saved tokens.

        Raises:
            NoSessionError: if no tokens are saved.
            SessionExpiredError: if the saved tokens are no longer valid.
        """
        if not self.has_session():
            raise NoSessionError(
                f"No Garmin session found at {self.tokens_dir}. "
                "Run `python -m p2g setup` to authenticate."
            )

        api = garminconnect.Garmin()
        try:
            api.login(str(self.tokens_dir))
        except Exception as exc:
            raise SessionExpiredError(
                "Garmin session has expired. "
                "Run `python -m p2g setup` to re-authenticate."
            ) from exc
        return api
