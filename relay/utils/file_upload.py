# relay/utils/file_upload.py

import re
import time
from pathlib import Path
from typing import Iterable, Optional

from fastapi import HTTPException, UploadFile

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ReceiptUploadValidator:
    """Checks an uploaded payment receipt before it is sent to object storage."""

    def __init__(self, allowed_types: Iterable[str], max_size_mb: int = 10):
        """
        Args:
            allowed_types: File extensions without the dot (e.g. 'pdf', 'png')
            max_size_mb: Largest accepted upload in megabytes
        """
        self.allowed_extensions = {
            f".{ext.lower().lstrip('.')}" for ext in allowed_types if ext
        }
        self.max_size = max_size_mb * 1024 * 1024

    def _get_file_extension(self, filename: str) -> str:
        """Extract file extension from filename."""
        return Path(filename).suffix.lower()

    def validate(self, file: Optional[UploadFile]) -> UploadFile:
        """
        Validate the uploaded receipt.

        Raises:
            HTTPException: If no file was attached or it is not acceptable
        """
        if file is None or not file.filename:
            raise HTTPException(status_code=400, detail="No receipt file uploaded")

        extension = self._get_file_extension(file.filename)
        if extension not in self.allowed_extensions:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type. Allowed types: {', '.join(sorted(self.allowed_extensions))}",
            )

        if file.size is not None:
            if file.size == 0:
                raise HTTPException(status_code=400, detail="Uploaded file is empty")
            if file.size > self.max_size:
                raise HTTPException(
                    status_code=400,
                    detail=f"File size exceeds maximum allowed size of {self.max_size / (1024*1024)}MB",
                )

        return file


def safe_name(value: str) -> str:
    """Reduce a user-supplied name to characters safe for an object path."""
    cleaned = _UNSAFE_CHARS.sub("_", value).strip("._")
    return cleaned or "file"


def receipt_object_path(
    user_id: str, filename: str, timestamp: Optional[int] = None
) -> str:
    """Object path for a receipt: ``receipts/<userId>/<timestampMs>_<filename>``."""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return f"receipts/{safe_name(user_id)}/{timestamp}_{safe_name(filename)}"
