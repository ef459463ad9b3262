import json
import logging
import mimetypes
import os
import tempfile
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from botocore.utils import check_dns_name

from photovault.config import StorageConfig
from photovault.utils.crypto import decrypt

from .photo_storage import PhotoStorage
from .result import DiagnosticLine, FailureReason, StorageResult, UploadMode

TRANSPORT_ERRORS = (BotoCoreError, ClientError, Boto3Error, OSError)

_MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}
_FORBIDDEN_CODES = {"403", "AccessDenied", "Forbidden"}
_DEFAULT_CONTENT_TYPE = "image/jpeg"
_TEMP_PREFIX = "opme"


def build_client(config: StorageConfig) -> Any:
    """
    Build a boto3 S3 client from configuration, decrypting the stored
    credentials.
    """
    session = boto3.session.Session(
        aws_access_key_id=decrypt(config.aws_key_encrypted),
        aws_secret_access_key=decrypt(config.aws_secret_encrypted),
        region_name=config.region,
    )
    return session.client(
        "s3",
        endpoint_url=config.endpoint_url,
        config=Config(s3={"addressing_style": config.addressing_style}),
    )


class S3Storage(PhotoStorage):
    """
    Photo storage using Amazon S3 (or an S3-compatible endpoint).
    """

    def __init__(
        self,
        config: StorageConfig,
        client: Any = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(config, logger or logging.getLogger(__name__))
        self.bucket = config.bucket
        self.client = client if client is not None else build_client(config)

    def identity(self) -> frozenset[str]:
        return frozenset({"s3"})

    def put_photo(
        self, local_file: str, remote_file: str, date_taken: datetime | None = None
    ) -> StorageResult:
        missing = self._check_local_file(local_file)
        if missing is not None:
            return missing
        if self._skips_original(remote_file):
            return StorageResult.success()

        key = self.normalize_path(remote_file)
        try:
            self._upload(local_file, key)
        except TRANSPORT_ERRORS as exc:
            self.logger.critical("Could not put photo on the file system: %s", exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))
        return StorageResult.success(key)

    def get_photo(self, remote_file: str) -> StorageResult:
        key = self.normalize_path(remote_file)
        fd, tmp_name = tempfile.mkstemp(prefix=_TEMP_PREFIX)
        os.close(fd)
        try:
            self.client.download_file(self.bucket, key, tmp_name)
        except TRANSPORT_ERRORS as exc:
            Path(tmp_name).unlink(missing_ok=True)
            self.logger.warning("The photo %s could not be downloaded %s", key, exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))
        return StorageResult.success(tmp_name)

    def delete_photo(self, photo: Mapping[str, Any]) -> StorageResult:
        keys = self._path_keys(photo)
        if not keys:
            return StorageResult.success([])
        try:
            response = self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": key} for key in keys]},
            )
        except TRANSPORT_ERRORS as exc:
            self.logger.critical("Could not delete photo from the file system: %s", exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))

        errors = response.get("Errors") or []
        if errors:
            failed = [error.get("Key", "") for error in errors]
            self.logger.warning(
                "Deleting %s of %s objects failed: %s", len(failed), len(keys), failed
            )
            return StorageResult.failure(
                FailureReason.PARTIAL_DELETE_FAILURE,
                f"{len(failed)} objects could not be deleted",
                value=failed,
            )
        return StorageResult.success(keys)

    def initialize(self, is_edit_mode: bool = False) -> StorageResult:
        self.logger.info("Initializing file system")
        if not check_dns_name(self.bucket):
            self.logger.warning(
                "The bucket name you provided (%s) is invalid.", self.bucket
            )
            return StorageResult.failure(
                FailureReason.INVALID_BUCKET_NAME, f"invalid bucket name {self.bucket!r}"
            )

        try:
            if not self.bucket_exists():
                self.logger.info(
                    "Bucket %s does not exist, creating it now", self.bucket
                )
                self._create_bucket()
        except TRANSPORT_ERRORS as exc:
            self.logger.critical("Could not create S3 bucket: %s", exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))

        try:
            self.client.put_bucket_policy(
                Bucket=self.bucket, Policy=json.dumps(self.bucket_policy())
            )
        except TRANSPORT_ERRORS as exc:
            # The bucket is usable without the policy
            self.logger.critical("Failed to set bucket policy: %s", exc)
        return StorageResult.success()

    def diagnostics(self) -> list[DiagnosticLine]:
        try:
            exists = self.bucket_exists()
        except TRANSPORT_ERRORS as exc:
            self.logger.warning("Bucket check for %s failed: %s", self.bucket, exc)
            exists = False
        if exists:
            return [
                DiagnosticLine(
                    True, f'Connection to bucket "{self.bucket}" is okay.'
                )
            ]
        return [
            DiagnosticLine(
                False, f'Connection to bucket "{self.bucket}" is NOT okay.'
            )
        ]

    def bucket_exists(self) -> bool:
        """
        True if the bucket exists, even when it belongs to another account.
        Errors other than not-found/forbidden are raised.
        """
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_BUCKET_CODES:
                return False
            if code in _FORBIDDEN_CODES:
                return True
            raise
        return True

    def bucket_policy(self) -> dict[str, Any]:
        return {
            "Version": "2008-10-17",
            "Statement": [
                {
                    "Sid": "AddPerm",
                    "Effect": "Allow",
                    "Principal": {"AWS": "*"},
                    "Action": ["s3:*"],
                    "Resource": [f"arn:aws:s3:::{self.bucket}/*"],
                }
            ],
        }

    def get_upload_opts(self, local_file: str) -> dict[str, str]:
        content_type, _ = mimetypes.guess_type(local_file)
        opts = {"ContentType": content_type or _DEFAULT_CONTENT_TYPE}
        # buckets with BucketOwnerEnforced ownership reject any ACL header
        if self.config.object_acl:
            opts["ACL"] = self.config.object_acl
        return opts

    def _upload(self, local_file: str, key: str) -> None:
        opts = self.get_upload_opts(local_file)
        if self.upload_type is UploadMode.INLINE:
            body = Path(local_file).read_bytes()
            self.client.put_object(Bucket=self.bucket, Key=key, Body=body, **opts)
        else:
            self.client.upload_file(local_file, self.bucket, key, ExtraArgs=opts)

    def _create_bucket(self) -> None:
        params: dict[str, Any] = {"Bucket": self.bucket, "ACL": "private"}
        # us-east-1 rejects an explicit location constraint
        if self.config.region and self.config.region != "us-east-1":
            params["CreateBucketConfiguration"] = {
                "LocationConstraint": self.config.region
            }
        self.client.create_bucket(**params)
