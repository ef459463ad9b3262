#!/usr/bin/env python3
"""
Script to prepare the configured photo storage backend.

- Loads storage settings from .env (or environment variables).
- Creates the bucket if it does not exist and sets its policy.
- Prints the backend diagnostics.

Required in .env or environment (S3 backend):
    S3_BUCKET
    CREDENTIALS_SECRET
    AWS_KEY_ENCRYPTED, AWS_SECRET_ENCRYPTED (optional, see encrypt_credential.py)

Usage:
    python scripts/initialize_bucket.py [--edit]
"""

import argparse
import logging
import sys

from dotenv import load_dotenv  # type: ignore[import]

from photovault.storage import get_storage_backend

load_dotenv()
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--edit", action="store_true", help="re-run setup on an existing install")
    args = parser.parse_args()

    storage = get_storage_backend()
    result = storage.initialize(args.edit)
    if not result:
        print(f"Initialization failed ({result.reason}): {result.detail}")  # noqa: T201
    for line in storage.diagnostics():
        print(f"[{'ok' if line.ok else 'FAIL'}] {line.message}")  # noqa: T201
    return 0 if result else 1


if __name__ == "__main__":
    sys.exit(main())
