"""MinIO / S3 storage operations - upload a finished day file"""
import logging
import threading
from pathlib import Path
from typing import Any, Dict

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from csv_uploader.config import CSV_CONTENT_TYPE, MINIO_CONFIG, PUBLIC_READ_ACL
from csv_uploader.errors import UploadError
from csv_uploader.storage.file_sink import remove_file

logger = logging.getLogger(__name__)


def get_minio_client() -> Minio:
    """Get MinIO client"""
    return Minio(
        MINIO_CONFIG["endpoint"],
        access_key=MINIO_CONFIG["access_key"],
        secret_key=MINIO_CONFIG["secret_key"],
        region=MINIO_CONFIG["region"],
        secure=MINIO_CONFIG["secure"]
    )


class UploadProgress(threading.Thread):
    """
    Progress hook for Minio.fput_object, logs every 10% of bytes sent.

    The SDK requires a Thread instance and calls set_meta() once and update()
    per part; logging happens inline so the thread is never started.
    """

    def __init__(self, step: int = 10):
        super().__init__(daemon=True)
        self.step = step
        self.object_name = None
        self.total = 0
        self.sent = 0
        self.last_logged = 0
        self._progress_lock = threading.Lock()

    def set_meta(self, object_name: str, total_length: int) -> None:
        self.object_name = object_name
        self.total = total_length or 0

    def update(self, size: int) -> None:
        with self._progress_lock:
            self.sent += size
            if not self.total:
                return
            percent = min(100, int(self.sent * 100 / self.total))
            boundary = percent - percent % self.step
            if boundary > self.last_logged:
                self.last_logged = boundary
                logger.info(f"Upload percentage: {boundary}%")


class ObjectStoreUploader:
    """
    Uploads a completed CSV to the bucket, then deletes the local file.

    The object key is the file name. The local file is removed exactly once
    after the upload attempt, whether or not it succeeded.
    """

    def __init__(self, client: Minio, bucket: str = None):
        self.client = client
        self.bucket = bucket or MINIO_CONFIG["bucket"]

    def upload_and_cleanup(self, path: Path, day=None) -> Dict[str, Any]:
        """
        Upload `path` under key `path.name` with public-read access.

        Returns:
            Dict with bucket, object and etag of the upload

        Raises:
            UploadError: upload failed (raised after the local file is gone)
        """
        path = Path(path)
        object_name = path.name
        logger.info(f"Uploading {object_name} to {self.bucket}.")

        try:
            result = self.client.fput_object(
                bucket_name=self.bucket,
                object_name=object_name,
                file_path=str(path),
                content_type=CSV_CONTENT_TYPE,
                metadata=dict(PUBLIC_READ_ACL),
                progress=UploadProgress(),
            )
        except (MinioException, HTTPError, OSError, ValueError) as e:
            logger.error(f"Unable to upload {object_name}: {e}")
            raise UploadError(f"Upload of {object_name} to {self.bucket} failed: {e}", day=day) from e
        finally:
            remove_file(path)

        logger.info(f"New file uploaded: {self.bucket}/{object_name}")
        return {
            "bucket": self.bucket,
            "object": object_name,
            "etag": getattr(result, "etag", None),
        }
