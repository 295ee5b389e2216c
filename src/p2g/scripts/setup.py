"""
Interactive Garmin setup.

Prompts for Garmin credentials once, exchanges them for OAuth tokens, and
saves the tokens to GARMIN_TOKENS_DIR (default ~/.p2g/garmin_session/) with
owner-only permissions. Uploads after that use the saved tokens only.

Usage:
    python -m p2g setup

Re-run whenever uploads start failing with an expired session.
"""
import getpass
import sys

from p2g.config import get_settings
from p2g.garmin.auth import GarminAuth


def run_setup() -> None:
    auth = GarminAuth(get_settings().garmin_tokens_dir)

    print("\nP2G — Garmin Connect setup\n")
    print("Your password will NOT be saved to disk.")
    print(f"Session tokens will be stored in: {auth.tokens_dir}\n")

    if auth.has_session():
        print("An existing session was found.")
        overwrite = input("Overwrite it with a new login? [y/N] ").strip().lower()
        if overwrite != "y":
            print("Setup cancelled. Existing session unchanged.")
            sys.exit(0)

    email = input("Garmin Connect email: ").strip()
    if not email:
        print("Error: email cannot be empty.")
        sys.exit(1)

    password = getpass.getpass("Garmin Connect password: ")
    if not password:
        print("Error: password cannot be empty.")
        sys.exit(1)

    print("\nAuthenticating with Garmin Connect...")
    try:
        auth.authenticate_and_save(email, password)
    except Exception as exc:
        print(f"\nAuthentication failed: {exc}")
        print("Check your email and password and try again.")
        sys.exit(1)

    print(f"\nTokens saved to {auth.tokens_dir}")
    print("If the session expires, re-run:  python -m p2g setup\n")


if __name__ == "__main__":
    run_setup()
