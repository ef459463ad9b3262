"""
Storage configuration read from the environment.

All values come from environment variables (a `.env` file is loaded by
`photovault.main` and the scripts). Credentials are stored encrypted and are
only decrypted when a storage client is built.
"""

import os
from dataclasses import dataclass

DEFAULT_REGION = "eu-central-1"
DEFAULT_OBJECT_ACL = "public-read"
DEFAULT_LOCAL_ROOT = "./photos"


def _env_flag(name: str, default: str = "true") -> bool:
    return (os.getenv(name, default) or "").strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True, slots=True)
class StorageConfig:
    bucket: str = ""
    host: str = ""
    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    addressing_style: str = "auto"
    aws_key_encrypted: str = ""
    aws_secret_encrypted: str = ""
    object_acl: str = DEFAULT_OBJECT_ACL
    store_thumbs: bool = True
    local_root: str = DEFAULT_LOCAL_ROOT

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            bucket=(os.getenv("S3_BUCKET") or "").strip(),
            host=(os.getenv("S3_HOST") or "").strip(),
            region=(os.getenv("AWS_REGION") or DEFAULT_REGION).strip(),
            endpoint_url=(os.getenv("S3_ENDPOINT_URL") or "").strip() or None,
            addressing_style=(os.getenv("S3_ADDRESSING_STYLE") or "auto").strip(),
            aws_key_encrypted=(os.getenv("AWS_KEY_ENCRYPTED") or "").strip(),
            aws_secret_encrypted=(os.getenv("AWS_SECRET_ENCRYPTED") or "").strip(),
            object_acl=os.getenv("S3_OBJECT_ACL", DEFAULT_OBJECT_ACL).strip(),
            store_thumbs=_env_flag("STORE_THUMBS"),
            local_root=(os.getenv("STORAGE_LOCAL_ROOT") or DEFAULT_LOCAL_ROOT).strip(),
        )
