"""
Base Firestore service with common CRUD operations
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from ...core.config import settings
from ...core.exceptions import FirestoreException, ResourceNotFoundException, ShelfwiseException
from ...core.firebase_config import get_db

logger = logging.getLogger(__name__)

# Firestore caps a write batch at 500 operations
BATCH_LIMIT = 500


class FirestoreBaseService:
    """Base service for Firestore operations"""

    def __init__(self, collection_name: str, db=None):
        """
        Initialize base service

        Args:
            collection_name: Name of the Firestore collection
            db: Firestore client; the app-wide client when omitted
        """
        self.collection_name = collection_name
        self.db = db if db is not None else get_db()
        self.collection = self.db.collection(collection_name)
        self.max_write_attempts = settings.MAX_WRITE_ATTEMPTS

    async def get_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a document by ID

        Returns:
            Document data, or None if it does not exist

        Raises:
            FirestoreException: If the read fails
        """
        try:
            doc = self.collection.document(doc_id).get()
            if not doc.exists:
                return None

            data = doc.to_dict()
            data['id'] = doc.id
            logger.debug(f"Retrieved document {doc_id} from {self.collection_name}")
            return data

        except Exception as e:
            logger.error(f"Error retrieving document {doc_id} from {self.collection_name}: {str(e)}")
            raise FirestoreException(
                f"Failed to retrieve document from {self.collection_name}",
                details={"doc_id": doc_id, "error": str(e)}
            )

    async def get_all_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Get all documents for a user"""
        return await self.query([("user_id", "==", user_id)])

    async def query(
        self,
        filters: List[tuple],
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        direction: str = firestore.Query.ASCENDING
    ) -> List[Dict[str, Any]]:
        """
        Query documents with custom filters

        Args:
            filters: List of (field, operator, value) tuples
            order_by: Field to order by
            direction: `firestore.Query.ASCENDING` or `DESCENDING`
            limit: Maximum number of results

        Returns:
            List of matching documents

        Raises:
            FirestoreException: If query fails
        """
        try:
            query = self.collection

            for field, operator, value in filters:
                query = query.where(field, operator, value)

            if order_by:
                query = query.order_by(order_by, direction=direction)

            if limit:
                query = query.limit(limit)

            results = []
            for doc in query.stream():
                data = doc.to_dict()
                data['id'] = doc.id
                results.append(data)

            logger.debug(f"Query returned {len(results)} documents from {self.collection_name}")
            return results

        except Exception as e:
            logger.error(f"Error querying {self.collection_name}: {str(e)}")
            raise FirestoreException(
                f"Failed to query {self.collection_name}",
                details={"error": str(e)}
            )

    async def merge(self, doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create-or-merge a document in a single write and return its new contents.

        Transforms such as `firestore.Increment` are applied atomically by the
        server, so concurrent merges into the same document never lose updates.
        """
        try:
            doc_ref = self.collection.document(doc_id)
            doc_ref.set(data, merge=True)
            result = doc_ref.get().to_dict()
            result['id'] = doc_id
            return result

        except Exception as e:
            logger.error(f"Error merging document {doc_id} into {self.collection_name}: {str(e)}")
            raise FirestoreException(
                f"Failed to write to {self.collection_name}",
                details={"doc_id": doc_id, "error": str(e)}
            )

    async def read_modify_write(
        self,
        doc_id: str,
        build_changes: Callable[[Dict[str, Any]], Dict[str, Any]],
        build_new: Optional[Callable[[], Dict[str, Any]]] = None,
        missing_error: Optional[ShelfwiseException] = None,
    ) -> Dict[str, Any]:
        """
        Apply a computed change to a document without losing concurrent writes.

        `build_changes` receives the current document and returns the fields to
        update (empty for no change). The update is conditioned on the snapshot's
        update time and recomputed if another writer got there first. When the
        document is missing, `build_new` supplies its initial contents; without
        it the call fails with `missing_error`, or ResourceNotFoundException.
        """
        doc_ref = self.collection.document(doc_id)

        for attempt in range(1, self.max_write_attempts + 1):
            try:
                snapshot = doc_ref.get()

                if not snapshot.exists:
                    if build_new is None:
                        if missing_error is not None:
                            raise missing_error
                        raise ResourceNotFoundException(
                            f"Document not found in {self.collection_name}",
                            details={"doc_id": doc_id}
                        )
                    data = build_new()
                    doc_ref.create(data)
                    data['id'] = doc_id
                    logger.info(f"Created document {doc_id} in {self.collection_name}")
                    return data

                current = snapshot.to_dict()
                changes = build_changes(current)
                if changes:
                    doc_ref.update(
                        changes,
                        option=self.db.write_option(last_update_time=snapshot.update_time)
                    )
                    current.update(changes)
                    logger.debug(f"Updated document {doc_id} in {self.collection_name}")
                current['id'] = doc_id
                return current

            except (google_exceptions.FailedPrecondition, google_exceptions.Conflict):
                logger.warning(
                    f"Concurrent write on {self.collection_name}/{doc_id}, "
                    f"retrying ({attempt}/{self.max_write_attempts})"
                )
            except ShelfwiseException:
                raise
            except Exception as e:
                logger.error(f"Error updating document {doc_id} in {self.collection_name}: {str(e)}")
                raise FirestoreException(
                    f"Failed to update document in {self.collection_name}",
                    details={"doc_id": doc_id, "error": str(e)}
                )

        raise FirestoreException(
            f"Too many concurrent writes to {self.collection_name}",
            details={"doc_id": doc_id, "attempts": self.max_write_attempts}
        )

    async def delete(self, doc_id: str) -> bool:
        """
        Delete a document

        Raises:
            ResourceNotFoundException: If document not found
            FirestoreException: If deletion fails
        """
        try:
            doc_ref = self.collection.document(doc_id)

            if not doc_ref.get().exists:
                raise ResourceNotFoundException(
                    f"Document not found in {self.collection_name}",
                    details={"doc_id": doc_id}
                )

            doc_ref.delete()

            logger.info(f"Deleted document {doc_id} from {self.collection_name}")
            return True

        except ResourceNotFoundException:
            raise
        except Exception as e:
            logger.error(f"Error deleting document {doc_id} from {self.collection_name}: {str(e)}")
            raise FirestoreException(
                f"Failed to delete document from {self.collection_name}",
                details={"doc_id": doc_id, "error": str(e)}
            )

    async def delete_all_by_user(self, user_id: str) -> int:
        """Delete every document owned by a user in batched writes"""
        try:
            refs = [doc.reference for doc in self.collection.where("user_id", "==", user_id).stream()]

            for start in range(0, len(refs), BATCH_LIMIT):
                batch = self.db.batch()
                for ref in refs[start:start + BATCH_LIMIT]:
                    batch.delete(ref)
                batch.commit()

            logger.info(f"Deleted {len(refs)} documents from {self.collection_name} for user {user_id}")
            return len(refs)

        except Exception as e:
            logger.error(f"Error deleting documents from {self.collection_name}: {str(e)}")
            raise FirestoreException(
                f"Failed to delete documents from {self.collection_name}",
                details={"user_id": user_id, "error": str(e)}
            )
