"""Document database backed by a single locked JSON file.

Layout on disk::

    {"collections": {"events": {"<id>": {...}}, "users": {"<id>": {...}}}}

Each public operation reads, modifies and writes the whole file under a lock,
so a single document write is atomic.
"""
import copy
import logging
import os
import uuid
from typing import Any, Dict, List, Optional, Tuple

from webinar_admin.services.storage_service import load_json, lock_file, save_json
from webinar_admin.utils.exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Missing values sort before every present value.
    if value is None:
        return (0, 0)
    return (1, value)


class JsonDocumentStore:
    """Collections of JSON documents addressed by opaque string ids."""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.file_path):
            return {"collections": {}}
        data = load_json(self.file_path)
        data.setdefault("collections", {})
        return data

    def _collection(self, data: Dict[str, Any], name: str) -> Dict[str, Document]:
        return data["collections"].setdefault(name, {})

    def get_all(self, collection: str) -> List[Tuple[str, Document]]:
        """Return ``(id, document)`` pairs in insertion order."""
        docs = self._collection(self._read(), collection)
        return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in docs.items()]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        docs = self._collection(self._read(), collection)
        doc = docs.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def query(
        self,
        collection: str,
        order_by: str,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Tuple[str, Document]]:
        """
        Return documents ordered by a top-level field.

        Args:
            collection: Collection name
            order_by: Field name to sort on
            descending: Newest/largest first when True
            limit: Maximum number of documents (None for all)
        """
        docs = self.get_all(collection)
        docs.sort(key=lambda item: _sort_key(item[1].get(order_by)), reverse=descending)
        if limit is not None:
            docs = docs[:limit]
        return docs

    def add(self, collection: str, document: Document) -> str:
        """Insert a document under a newly generated id and return the id."""
        doc_id = uuid.uuid4().hex
        with lock_file(self.file_path):
            data = self._read()
            self._collection(data, collection)[doc_id] = copy.deepcopy(document)
            save_json(self.file_path, data, backup=True)

        logger.info("Added document %s/%s", collection, doc_id)
        return doc_id

    def set(self, collection: str, doc_id: str, document: Document) -> None:
        """
        Replace an existing document.

        Raises:
            DocumentNotFoundError: If the id does not exist
        """
        with lock_file(self.file_path):
            data = self._read()
            docs = self._collection(data, collection)
            if doc_id not in docs:
                raise DocumentNotFoundError(f"Document not found: {collection}/{doc_id}")
            docs[doc_id] = copy.deepcopy(document)
            save_json(self.file_path, data, backup=True)

        logger.info("Replaced document %s/%s", collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> None:
        """
        Permanently remove a document.

        Raises:
            DocumentNotFoundError: If the id does not exist
        """
        with lock_file(self.file_path):
            data = self._read()
            docs = self._collection(data, collection)
            if doc_id not in docs:
                raise DocumentNotFoundError(f"Document not found: {collection}/{doc_id}")
            del docs[doc_id]
            save_json(self.file_path, data, backup=True)

        logger.info("Deleted document %s/%s", collection, doc_id)
