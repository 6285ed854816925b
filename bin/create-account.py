"""Create a hub account from the command line.

Usage: uv run python bin/create-account.py <name> <username> <email>

The password is read from the terminal without echo.
"""

import asyncio
import getpass
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from shared.auth import AuthService, AuthServiceError, SessionTokenIssuer
from shared.auth.password import get_hasher
from shared.auth.schemas import RegisterRequest
from shared.auth.settings import AuthSettings
from shared.db import Database, SqliteAccountRepository


async def main() -> None:
    if len(sys.argv) != 4:
        print(f"Usage: {sys.argv[0]} <name> <username> <email>")
        sys.exit(1)

    name, username, email = sys.argv[1:]
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("Error: Passwords do not match")
        sys.exit(1)

    # Only database_path and the hasher settings are needed; supply a
    # placeholder for token_secret so the script works without
    # AUTH_TOKEN_SECRET being set. No tokens are issued here.
    auth_settings = AuthSettings(token_secret="unused")  # type: ignore[call-arg]

    db = Database(auth_settings.database_path)
    db.connect()

    try:
        auth_service = AuthService(
            SqliteAccountRepository(db),
            SessionTokenIssuer(auth_settings.token_secret),
            password_hasher=get_hasher(auth_settings.password_hasher, rounds=auth_settings.bcrypt_rounds),
        )

        try:
            account = await auth_service.register(
                RegisterRequest(name=name, username=username, email=email, password=password),
            )
        except AuthServiceError as e:
            print(f"Error: {e.message}")
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)

        print(f"Account created: {account.username} (id: {account.account_id})")
    finally:
        db.close()


if __name__ == "__main__":
    asyncio.run(main())
