# pickup_manager/api/errors.py
from fastapi import HTTPException, status

from pickup_manager.core.exceptions import (
    AttachmentRejectedError,
    InventoryItemNotFoundError,
    PickupManagerError,
    RemoteStoreError,
    RequestNotFoundError,
    RequestValidationError,
)
from pickup_manager.domains.attachments.repository import AttachmentNotFoundError


def to_http_exception(error: PickupManagerError) -> HTTPException:
    """
    Map a domain error to the HTTP error returned to the client
    """
    if isinstance(error, RequestValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error.messages
        )

    if isinstance(error, (RequestNotFoundError, InventoryItemNotFoundError, AttachmentNotFoundError)):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(error)
        )

    if isinstance(error, AttachmentRejectedError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(error)
        )

    if isinstance(error, RemoteStoreError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Remote store error: {str(error)}"
        )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(error)
    )
