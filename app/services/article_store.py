# app/services/article_store.py
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from app.errors import InvalidRequest, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


def to_jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class ArticleStore:
    def __init__(
        self,
        uri: str,
        db_name: str,
        collection: str,
        timeout_ms: int = 10000,
        client_factory: Callable[..., Any] = MongoClient,
    ):
        self._uri = uri
        self._db_name = db_name
        self._collection_name = collection
        self._timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client = None
        self._lock = threading.Lock()

    def _collection(self):
        if self._client is None:
            with self._lock:
                if self._client is None:
                    logger.info("Connecting to MongoDB database=%s", self._db_name)
                    self._client = self._client_factory(
                        self._uri,
                        serverSelectionTimeoutMS=self._timeout_ms,
                        connectTimeoutMS=self._timeout_ms,
                    )
        return self._client[self._db_name][self._collection_name]

    def list_recent(self, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
        try:
            cursor = self._collection().find({}).sort("created_at", DESCENDING).limit(limit)
            docs = list(cursor)
        except PyMongoError as e:
            logger.error("Fetching articles failed: %s", e)
            raise UpstreamError(str(e) or "Failed to fetch articles") from e
        logger.debug("Found %d articles", len(docs))
        return [to_jsonable(d) for d in docs]

    def get(self, article_id: str) -> Optional[Dict[str, Any]]:
        try:
            oid = ObjectId(article_id)
        except (InvalidId, TypeError) as e:
            raise InvalidRequest("Invalid article id") from e
        try:
            doc = self._collection().find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Fetching article %s failed: %s", article_id, e)
            raise UpstreamError(str(e) or "Failed to fetch article") from e
        return to_jsonable(doc) if doc else None

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
