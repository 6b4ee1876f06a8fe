#!/usr/bin/env python3
"""Mint a development access token signed with the configured secret.

Production tokens are issued by the identity provider; this only exists so
a local server can be exercised without one.

Usage:
    python scripts/issue_dev_token.py --role renter
    python scripts/issue_dev_token.py --role host --user-id <UUID> --minutes 120
"""

import argparse
from datetime import timedelta
from uuid import UUID, uuid4

from himaagarshare.core.security import Role, create_access_token


def main():
    parser = argparse.ArgumentParser(description="Issue a development JWT")
    parser.add_argument("--role", required=True, choices=[r.value for r in Role], help="Token role claim")
    parser.add_argument("--user-id", type=UUID, default=None, help="User UUID (random if omitted)")
    parser.add_argument("--minutes", type=int, default=60, help="Token lifetime in minutes")
    args = parser.parse_args()

    user_id = args.user_id or uuid4()
    token = create_access_token(user_id, args.role, expires_delta=timedelta(minutes=args.minutes))

    print(f"User ID: {user_id}")
    print(f"Role:    {args.role}")
    print(token)


if __name__ == "__main__":
    main()
