# relay/services/storage.py
import logging
from typing import NamedTuple
from urllib.parse import quote

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from relay.core.exceptions import store_exception
from relay.utils.file_upload import receipt_object_path

logger = logging.getLogger(__name__)

PUBLIC_URL_BASE = "https://storage.googleapis.com"


class StoredReceipt(NamedTuple):
    path: str
    url: str


class ReceiptStorage:
    """Uploads receipts to a Cloud Storage bucket and exposes them publicly."""

    def __init__(self, bucket):
        self.bucket = bucket

    def public_url(self, path: str) -> str:
        return f"{PUBLIC_URL_BASE}/{self.bucket.name}/{quote(path)}"

    @store_exception("Storage bucket not found")
    async def upload_receipt(self, file: UploadFile, user_id: str) -> StoredReceipt:
        path = receipt_object_path(user_id, file.filename or "receipt")
        blob = self.bucket.blob(path)

        await run_in_threadpool(
            blob.upload_from_file,
            file.file,
            rewind=True,
            content_type=file.content_type,
        )
        await run_in_threadpool(blob.make_public)

        logger.info(f"Receipt stored at gs://{self.bucket.name}/{path}")
        return StoredReceipt(path, self.public_url(path))
