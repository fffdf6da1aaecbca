"""Storage configuration (MinIO / S3)"""
import os

MINIO_CONFIG = {
    "endpoint": os.getenv("MINIO_ENDPOINT", "s3.amazonaws.com"),
    "access_key": os.getenv("MINIO_ACCESS_KEY", os.getenv("AWS_ACCESS_KEY_ID")),
    "secret_key": os.getenv("MINIO_SECRET_KEY", os.getenv("AWS_SECRET_ACCESS_KEY")),
    "region": os.getenv("MINIO_REGION"),
    "bucket": os.getenv("BUCKET_NAME", "openaq-data"),
    "secure": os.getenv("MINIO_SECURE", "true").lower() in ("1", "true", "yes"),
}

CSV_CONTENT_TYPE = "text/csv"
PUBLIC_READ_ACL = {"x-amz-acl": "public-read"}
