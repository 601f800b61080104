"""
Issue an admin bearer token for local development.

In deployed environments tokens come from the login service; locally there
is none, so this signs one with JWT_SECRET_KEY:

    python create_admin_token.py admin@example.com
"""

import sys
from datetime import timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from catalog.auth.jwt_utils import create_access_token
from catalog.config.settings import ADMIN_ROLE


def main():
    if len(sys.argv) < 2:
        print("Usage: python create_admin_token.py <admin-id> [expiry-minutes]")
        sys.exit(1)

    subject = sys.argv[1]
    minutes = int(sys.argv[2]) if len(sys.argv) > 2 else 60
    token = create_access_token(
        subject,
        extra_claims={"role": ADMIN_ROLE, "email": subject},
        expires_delta=timedelta(minutes=minutes)
    )

    print("Admin Token Generated Successfully!")
    print("=" * 50)
    print(f"Subject: {subject}")
    print(f"Expires in: {minutes} minutes")
    print()
    print(token)
    print("=" * 50)
    print("Send as: Authorization: Bearer <token>")


if __name__ == "__main__":
    main()
