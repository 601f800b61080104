import io
import logging
import os
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config.settings import (
    AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
    AWS_REGION, S3_BUCKET_NAME, S3_BASE_URL,
    LOCAL_STORAGE_DIR, PUBLIC_BASE_URL
)
from ..core.exceptions import StorageError
from .file_utils import ensure_dir

logger = logging.getLogger(__name__)


class ObjectStore:
    """Interface of the blob store that holds uploaded files.

    store() must only return once the blob is durably written; callers rely on
    that before they reference the returned URL anywhere.
    """

    def store(self, data: bytes, path: str, content_type: Optional[str] = None) -> str:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError


def _create_s3_client():
    """boto3 S3 client, or None when any S3 setting is missing"""
    required = {
        "AWS_ACCESS_KEY_ID": AWS_ACCESS_KEY_ID,
        "AWS_SECRET_ACCESS_KEY": AWS_SECRET_ACCESS_KEY,
        "S3_BUCKET_NAME": S3_BUCKET_NAME,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        logger.info(f"S3 disabled, missing settings: {', '.join(missing)}")
        return None

    client = boto3.client(
        's3',
        aws_access_key_id=AWS_ACCESS_KEY_ID,
        aws_secret_access_key=AWS_SECRET_ACCESS_KEY,
        region_name=AWS_REGION
    )
    logger.info(f"S3 object store: bucket {S3_BUCKET_NAME} in {AWS_REGION}")
    return client


class S3ObjectStore(ObjectStore):
    def __init__(self, client, bucket: str, base_url: str):
        self.client = client
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")

    def store(self, data: bytes, path: str, content_type: Optional[str] = None) -> str:
        extra_args = {}
        if content_type:
            extra_args['ContentType'] = content_type
        try:
            self.client.upload_fileobj(
                io.BytesIO(data),
                self.bucket,
                path,
                ExtraArgs=extra_args
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload file to S3: {str(e)}", details={"path": path}) from e
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def delete(self, path: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete file from S3: {str(e)}", details={"path": path}) from e


class LocalObjectStore(ObjectStore):
    """Filesystem-backed store for development; files are served under base_url"""

    def __init__(self, root_dir: str, base_url: str):
        self.root_dir = os.path.abspath(root_dir)
        self.base_url = base_url.rstrip("/")

    def _full_path(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.root_dir, path))
        if os.path.commonpath([full_path, self.root_dir]) != self.root_dir:
            raise StorageError(f"Object path escapes storage root: {path}", details={"path": path})
        return full_path

    def store(self, data: bytes, path: str, content_type: Optional[str] = None) -> str:
        full_path = self._full_path(path)
        try:
            ensure_dir(os.path.dirname(full_path))
            tmp_path = f"{full_path}.part"
            with open(tmp_path, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, full_path)
        except OSError as e:
            raise StorageError(f"Failed to write file to local storage: {str(e)}", details={"path": path}) from e
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def delete(self, path: str) -> None:
        try:
            os.remove(self._full_path(path))
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to delete file from local storage: {str(e)}", details={"path": path}) from e


_object_store: Optional[ObjectStore] = None


def get_object_store() -> ObjectStore:
    """Return the configured object store, S3 when fully configured else local disk"""
    global _object_store
    if _object_store is None:
        client = _create_s3_client()
        if client is not None:
            _object_store = S3ObjectStore(client, S3_BUCKET_NAME, S3_BASE_URL)
        else:
            logger.warning(f"S3 not available, storing uploads under {LOCAL_STORAGE_DIR}")
            _object_store = LocalObjectStore(LOCAL_STORAGE_DIR, PUBLIC_BASE_URL)
    return _object_store
