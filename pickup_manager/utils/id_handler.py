"""
Document id helpers.

Pickup requests and attachments are keyed by ObjectIds. Inventory rows keep
the short application ids they were seeded with ("1", "2"...), so lookups
have to accept both forms.
"""
from typing import Any, Dict, List, Optional, Tuple, Union
from bson import ObjectId

Document = Dict[str, Any]


class IdHandler:
    """
    Conversions between ObjectIds and the string ids used by the models.
    """

    @staticmethod
    def ensure_object_id(id_value: Any) -> Optional[ObjectId]:
        """ObjectId for a valid hex string or ObjectId, None for anything else."""
        if isinstance(id_value, ObjectId):
            return id_value
        if isinstance(id_value, str) and ObjectId.is_valid(id_value):
            return ObjectId(id_value)
        return None

    @staticmethod
    def format_object_ids(data: Union[Document, List[Document], None]) -> Union[Document, List[Document], None]:
        """
        Replace every ObjectId inside a document, or a list of documents,
        with its hex string. Nested dicts and lists are walked too.
        """
        if isinstance(data, ObjectId):
            return str(data)
        if isinstance(data, list):
            return [IdHandler.format_object_ids(value) for value in data]
        if isinstance(data, dict):
            return {key: IdHandler.format_object_ids(value) for key, value in data.items()}
        return data

    @staticmethod
    def id_to_str(id_value: Any) -> Optional[str]:
        return None if id_value is None else str(id_value)

    @staticmethod
    async def find_document_by_id(collection, doc_id: Any) -> Tuple[Optional[Document], Any]:
        """
        Look a document up by ObjectId first, then by the raw id.

        Returns:
            Tuple of (document, the _id value it is stored under), or (None, None)
        """
        candidates = []
        obj_id = IdHandler.ensure_object_id(doc_id)
        if obj_id is not None:
            candidates.append(obj_id)
        if not isinstance(doc_id, ObjectId):
            candidates.append(doc_id)

        for candidate in candidates:
            document = await collection.find_one({"_id": candidate})
            if document:
                return document, document["_id"]
        return None, None

    @staticmethod
    def generate_id() -> str:
        """New ObjectId hex string, used for local request ids and new inventory rows."""
        return str(ObjectId())
