'''
----------------------------
Object storage (Google Cloud Storage)
Two buckets: legacy single images, multi-file submissions
----------------------------
'''

import logging
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from google.cloud import storage

logger = logging.getLogger(__name__)


def _public_base():
    return current_app.config.get("GCS_PUBLIC_URL_BASE", "https://storage.googleapis.com").rstrip("/")


def build_object_path(owner_id, original_filename):
    # <owner id>/<random token>.<ext>, random token so rapid uploads never collide
    safe_original_filename = secure_filename(original_filename or "")
    extension = ""
    if '.' in safe_original_filename:
        # Split list starting from the right, only dividing into 2 parts
        extension = safe_original_filename.rsplit('.', 1)[1].lower()

    token = uuid.uuid4().hex
    if extension:
        return f"{owner_id}/{token}.{extension}"
    return f"{owner_id}/{token}"


def public_url(bucket_name, object_path):
    return f"{_public_base()}/{bucket_name}/{object_path}"


def upload_file(bucket_name, object_path, file_to_upload, content_type):
    # Uploads a file object to the bucket and returns its public URL
    if not bucket_name:
        raise ConnectionError("Storage bucket is not configured")

    try:
        storage_client = storage.Client()
        bucket = storage_client.bucket(bucket_name)
        blob = bucket.blob(object_path)

        blob.upload_from_file(
            file_to_upload,
            content_type = content_type
        )
    except Exception as e:
        logger.error("Upload of %s to bucket %s failed: %s", object_path, bucket_name, e)
        raise ConnectionError(f"Failed to upload file to cloud storage: {str(e)}")

    logger.info("Uploaded %s to bucket %s", object_path, bucket_name)
    return public_url(bucket_name, object_path)


def delete_file(bucket_name, object_path):
    # Best effort, returns False instead of raising
    if not bucket_name or not object_path:
        logger.warning("Invalid bucket or path for deletion: %s/%s", bucket_name, object_path)
        return False

    try:
        storage_client = storage.Client()
        bucket = storage_client.bucket(bucket_name)
        bucket.blob(object_path).delete()
    except Exception as e:
        logger.error("Delete of %s from bucket %s failed: %s", object_path, bucket_name, e)
        return False

    logger.info("Deleted %s from bucket %s", object_path, bucket_name)
    return True
