"""
Attachment storage backed by GridFS.
"""
import logging
from typing import Tuple

from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from pickup_manager.core.exceptions import RemoteStoreError
from pickup_manager.db.mongodb import get_attachments_bucket
from pickup_manager.utils.datetime_handler import DateTimeHandler
from pickup_manager.utils.id_handler import IdHandler

logger = logging.getLogger(__name__)


class AttachmentNotFoundError(RemoteStoreError):
    pass


class AttachmentRepository:
    """
    Stores request images and invoices under per-request path prefixes.
    """

    def __init__(self, bucket=None):
        self.bucket = bucket if bucket is not None else get_attachments_bucket()

    @staticmethod
    def build_path(request_id: str, filename: str) -> str:
        return f"requests/{request_id}/{DateTimeHandler.timestamp_millis()}_{filename}"

    async def upload(self, request_id: str, filename: str, content_type: str, data: bytes, kind: str) -> str:
        """
        Upload a blob and return its file id.

        Args:
            request_id: Owning request
            filename: Original file name
            content_type: MIME type reported by the client
            data: File contents
            kind: "image" or "invoice"
        """
        path = self.build_path(request_id, filename)
        try:
            file_id = await self.bucket.upload_from_stream(
                path,
                data,
                metadata={
                    "request_id": request_id,
                    "content_type": content_type,
                    "kind": kind,
                    "original_name": filename,
                },
            )
        except PyMongoError as e:
            raise RemoteStoreError(f"Error uploading attachment for request {request_id}: {str(e)}", e)

        logger.info(f"Stored {kind} attachment {path}")
        return str(file_id)

    async def download(self, file_id: str) -> Tuple[bytes, str, str]:
        """
        Read a stored blob.

        Returns:
            Tuple of (data, content_type, original file name)
        """
        obj_id = IdHandler.ensure_object_id(file_id)
        if obj_id is None:
            raise AttachmentNotFoundError(f"Attachment {file_id} not found")
        try:
            stream = await self.bucket.open_download_stream(obj_id)
            data = await stream.read()
        except NoFile as e:
            raise AttachmentNotFoundError(f"Attachment {file_id} not found", e)
        except PyMongoError as e:
            raise RemoteStoreError(f"Error reading attachment {file_id}: {str(e)}", e)

        metadata = stream.metadata or {}
        return (
            data,
            metadata.get("content_type", "application/octet-stream"),
            metadata.get("original_name", stream.filename),
        )
