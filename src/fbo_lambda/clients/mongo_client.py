"""
MongoDB client wrapper.

pymongo client with pool settings from configuration. Operations require an
explicit ``connect()``; driver failures and unacknowledged writes are logged
once and raised as ``MongoError``.
"""

import json
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pymongo import MongoClient as PyMongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from fbo_lambda.clients.base import BaseClient
from fbo_lambda.config.app_config import MongoConfig
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.utils.errors import MongoError
from fbo_lambda.utils.helpers import truncate_string
from fbo_lambda.utils.logger import StructuredLogger

Document = Dict[str, Any]
SortSpec = Union[Mapping[str, int], Sequence[Tuple[str, int]]]

_LOGGED_FILTER_LENGTH = 100


def _describe_filter(filter_: Mapping[str, Any]) -> str:
    return truncate_string(json.dumps(filter_, default=str), _LOGGED_FILTER_LENGTH)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class MongoClient(BaseClient):
    """MongoDB document operations on a single database."""

    service_name = 'MongoClient'

    def __init__(self, mongo_config: MongoConfig, logger: Optional[StructuredLogger] = None) -> None:
        super().__init__(logger)
        self.config = mongo_config
        self._client: Optional[PyMongoClient] = None
        self._db: Optional[Database] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._db is not None

    def connect(self) -> None:
        """
        Open the client, select the database and ping the server.

        The database is ``MONGO_DATABASE`` when set, otherwise the default
        database named in the connection string.

        Raises:
            MongoError: If the server cannot be reached or no database is configured
        """
        if self.is_connected:
            self.logger.debug('MongoDB connection already exists')
            return

        client = None
        try:
            client = PyMongoClient(
                self.config.uri,
                maxPoolSize=self.config.max_pool_size,
                minPoolSize=self.config.min_pool_size,
                maxIdleTimeMS=self.config.max_idle_time_ms,
                serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
            )
            db = client[self.config.database] if self.config.database else client.get_default_database()
            client.admin.command('ping')
        except PyMongoError as exc:
            if client is not None:
                client.close()
            self.logger.error('MongoDB connection failed', exc, {'hasUri': bool(self.config.uri)})
            raise MongoError('Failed to connect to MongoDB', details={'error': exc}) from exc

        self._client = client
        self._db = db
        self.logger.info('MongoDB connection established', {
            'hasUri': bool(self.config.uri),
            'database': db.name,
            'maxPoolSize': self.config.max_pool_size,
        })

    def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        except PyMongoError as exc:
            self.logger.error('MongoDB disconnect failed', exc)
            raise MongoError('Failed to close MongoDB connection', details={'error': exc}) from exc
        finally:
            self._client = None
            self._db = None
        self.logger.info('MongoDB connection closed')

    def _collection(self, name: str) -> Collection:
        if not self.is_connected:
            raise MongoError('Database connection not established. Call connect() first.')
        return self._db[name]

    def _fail(self, operation: str, exc: PyMongoError, collection: str, **details: Any) -> MongoError:
        self.logger.error(f'MongoDB {operation} failed', exc, {'collection': collection})
        return MongoError(f'{operation} operation failed', details={'error': exc, 'collection': collection, **details})

    def _check_acknowledged(self, result: Any, operation: str, collection: str) -> None:
        if not result.acknowledged:
            error = MongoError(
                f'{operation} operation was not acknowledged by the server',
                details={'collection': collection},
            )
            self.logger.error(f'MongoDB {operation} failed', error, {'collection': collection})
            raise error

    @tracer.capture_method
    def find_one(self, collection: str, filter_: Mapping[str, Any]) -> Optional[Document]:
        coll = self._collection(collection)
        start = time.monotonic()
        try:
            result = coll.find_one(filter_)
        except PyMongoError as exc:
            raise self._fail('find_one', exc, collection, filter=dict(filter_)) from exc

        self.logger.debug('MongoDB find_one executed', {
            'collection': collection,
            'filter': _describe_filter(filter_),
            'found': result is not None,
            'duration': _elapsed_ms(start),
        })
        return result

    @tracer.capture_method
    def find_many(
        self,
        collection: str,
        filter_: Mapping[str, Any],
        limit: Optional[int] = None,
        skip: Optional[int] = None,
        sort: Optional[SortSpec] = None,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> List[Document]:
        """
        Find documents matching ``filter_``.

        Args:
            collection: Collection name
            filter_: Query filter
            limit: Maximum number of documents
            skip: Number of documents to skip
            sort: ``{field: direction}`` or ``[(field, direction), ...]``
            projection: Fields to include or exclude

        Returns:
            Matching documents
        """
        coll = self._collection(collection)
        start = time.monotonic()
        try:
            cursor = coll.find(filter_, projection=projection)
            if limit:
                cursor = cursor.limit(limit)
            if skip:
                cursor = cursor.skip(skip)
            if sort:
                cursor = cursor.sort(list(sort.items()) if isinstance(sort, Mapping) else list(sort))
            results = list(cursor)
        except PyMongoError as exc:
            raise self._fail('find_many', exc, collection, filter=dict(filter_)) from exc

        self.logger.debug('MongoDB find_many executed', {
            'collection': collection,
            'filter': _describe_filter(filter_),
            'count': len(results),
            'duration': _elapsed_ms(start),
        })
        return results

    @tracer.capture_method
    def insert_one(self, collection: str, document: Mapping[str, Any]) -> Document:
        """Insert a document and return a copy of it including the generated ``_id``."""
        coll = self._collection(collection)
        to_insert = dict(document)
        start = time.monotonic()
        try:
            result = coll.insert_one(to_insert)
        except PyMongoError as exc:
            raise self._fail('insert_one', exc, collection) from exc
        self._check_acknowledged(result, 'insert_one', collection)

        self.logger.debug('MongoDB insert_one executed', {
            'collection': collection,
            'insertedId': str(result.inserted_id),
            'duration': _elapsed_ms(start),
        })
        return {**to_insert, '_id': result.inserted_id}

    @tracer.capture_method
    def insert_many(self, collection: str, documents: Sequence[Mapping[str, Any]]) -> List[Document]:
        coll = self._collection(collection)
        to_insert = [dict(document) for document in documents]
        start = time.monotonic()
        try:
            result = coll.insert_many(to_insert)
        except PyMongoError as exc:
            raise self._fail('insert_many', exc, collection, documentCount=len(to_insert)) from exc
        self._check_acknowledged(result, 'insert_many', collection)

        self.logger.debug('MongoDB insert_many executed', {
            'collection': collection,
            'insertedCount': len(result.inserted_ids),
            'duration': _elapsed_ms(start),
        })
        return [{**document, '_id': inserted_id} for document, inserted_id in zip(to_insert, result.inserted_ids)]

    def _update(self, method: str, collection: str, filter_: Mapping[str, Any], update: Mapping[str, Any]) -> int:
        coll = self._collection(collection)
        start = time.monotonic()
        try:
            result = getattr(coll, method)(filter_, {'$set': dict(update)})
        except PyMongoError as exc:
            raise self._fail(method, exc, collection, filter=dict(filter_)) from exc
        self._check_acknowledged(result, method, collection)

        self.logger.debug(f'MongoDB {method} executed', {
            'collection': collection,
            'filter': _describe_filter(filter_),
            'matchedCount': result.matched_count,
            'modifiedCount': result.modified_count,
            'duration': _elapsed_ms(start),
        })
        return result.modified_count

    @tracer.capture_method
    def update_one(self, collection: str, filter_: Mapping[str, Any], update: Mapping[str, Any]) -> bool:
        """Apply ``$set: update`` to the first match; True when a document changed."""
        return self._update('update_one', collection, filter_, update) > 0

    @tracer.capture_method
    def update_many(self, collection: str, filter_: Mapping[str, Any], update: Mapping[str, Any]) -> int:
        """Apply ``$set: update`` to every match; returns the modified count."""
        return self._update('update_many', collection, filter_, update)

    def _delete(self, method: str, collection: str, filter_: Mapping[str, Any]) -> int:
        coll = self._collection(collection)
        start = time.monotonic()
        try:
            result = getattr(coll, method)(filter_)
        except PyMongoError as exc:
            raise self._fail(method, exc, collection, filter=dict(filter_)) from exc
        self._check_acknowledged(result, method, collection)

        self.logger.debug(f'MongoDB {method} executed', {
            'collection': collection,
            'filter': _describe_filter(filter_),
            'deletedCount': result.deleted_count,
            'duration': _elapsed_ms(start),
        })
        return result.deleted_count

    @tracer.capture_method
    def delete_one(self, collection: str, filter_: Mapping[str, Any]) -> bool:
        return self._delete('delete_one', collection, filter_) > 0

    @tracer.capture_method
    def delete_many(self, collection: str, filter_: Mapping[str, Any]) -> int:
        return self._delete('delete_many', collection, filter_)
