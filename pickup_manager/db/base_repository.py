"""
Shared CRUD over one Motor collection of the remote document store.
"""
from typing import Any, Dict, List, Optional, Tuple

from pymongo.errors import DuplicateKeyError, PyMongoError

from pickup_manager.core.exceptions import RemoteStoreError
from pickup_manager.utils.id_handler import IdHandler
from pickup_manager.utils.datetime_handler import DateTimeHandler


class BaseRepository:
    """
    CRUD helpers shared by the request and inventory repositories.

    Documents leave the repository with string ids, and every driver error
    is re-raised as RemoteStoreError so callers only handle one failure type.
    """

    def __init__(self, collection):
        """
        Args:
            collection: Motor AsyncIOMotorCollection instance
        """
        self.collection = collection

    async def _locate(self, id_value: Any) -> Tuple[Optional[Dict[str, Any]], Any]:
        try:
            return await IdHandler.find_document_by_id(self.collection, id_value)
        except PyMongoError as e:
            raise RemoteStoreError(f"Error reading document {id_value}: {str(e)}", e)

    async def find_by_id(self, id_value: Any) -> Optional[Dict[str, Any]]:
        """Document with the given id, or None."""
        document, _ = await self._locate(id_value)
        return IdHandler.format_object_ids(document) if document else None

    async def find_many(self,
                        query: Dict[str, Any] = None,
                        sort_by: str = None,
                        sort_desc: bool = False) -> List[Dict[str, Any]]:
        """
        Every matching document. The collections here stay small (a few
        sites, a few thousand requests), so results are not paginated.

        Args:
            query: MongoDB filter, everything when omitted
            sort_by: Field to sort on
            sort_desc: Sort descending instead of ascending
        """
        cursor = self.collection.find(query or {})
        if sort_by:
            cursor = cursor.sort(sort_by, -1 if sort_desc else 1)

        try:
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise RemoteStoreError(f"Error listing documents: {str(e)}", e)
        return IdHandler.format_object_ids(documents)

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a document stamped with created_at and updated_at, then read it back.

        Raises:
            RemoteStoreError: If the insert fails or the document cannot be read back
        """
        now = DateTimeHandler.get_current_datetime()
        document = {"created_at": now, "updated_at": now, **data}

        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            raise RemoteStoreError("A document with this ID already exists", e)
        except PyMongoError as e:
            raise RemoteStoreError(f"Error creating document: {str(e)}", e)

        created = await self.find_by_id(result.inserted_id)
        if not created:
            raise RemoteStoreError(f"Document {result.inserted_id} was created but could not be read back")
        return created

    async def update(self, id_value: Any, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        $set the given fields and refresh updated_at.

        Returns:
            The updated document, or None when no document has this id
        """
        document, doc_id = await self._locate(id_value)
        if not document:
            return None

        fields = {k: v for k, v in data.items() if k not in ("_id", "id")}
        fields["updated_at"] = DateTimeHandler.get_current_datetime()
        try:
            await self.collection.update_one({"_id": doc_id}, {"$set": fields})
        except PyMongoError as e:
            raise RemoteStoreError(f"Error updating document {id_value}: {str(e)}", e)

        return await self.find_by_id(doc_id)

    async def delete(self, id_value: Any) -> bool:
        """True when a document was removed, False when none had this id."""
        document, doc_id = await self._locate(id_value)
        if not document:
            return False

        try:
            result = await self.collection.delete_one({"_id": doc_id})
        except PyMongoError as e:
            raise RemoteStoreError(f"Error deleting document {id_value}: {str(e)}", e)
        return result.deleted_count > 0
