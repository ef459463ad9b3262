#!/usr/bin/env python3
"""
Script to encrypt a storage credential for use in .env.

- Loads CREDENTIALS_SECRET from .env (or environment variables).
- With --generate-key, prints a new CREDENTIALS_SECRET instead.

Usage:
    python scripts/encrypt_credential.py <value>
    python scripts/encrypt_credential.py --generate-key
"""

import argparse
import sys

from cryptography.fernet import Fernet
from dotenv import load_dotenv  # type: ignore[import]

from photovault.utils.crypto import encrypt

load_dotenv()


def main() -> int:
    parser = argparse.ArgumentParser(description="Encrypt a storage credential")
    parser.add_argument("value", nargs="?", help="plain text credential")
    parser.add_argument("--generate-key", action="store_true", help="print a new secret")
    args = parser.parse_args()

    if args.generate_key:
        print(Fernet.generate_key().decode())  # noqa: T201
        return 0
    if not args.value:
        parser.error("a value to encrypt is required")
    try:
        print(encrypt(args.value))  # noqa: T201
    except RuntimeError as exc:
        print(exc)  # noqa: T201
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
