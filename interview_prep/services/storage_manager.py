"""Storage Manager for handling data persistence and retrieval.

Records are persisted as JSON documents grouped in collections. The
``StorageManager`` is constructed explicitly and passed to the services that
need it; it must be initialized before use and closed at shutdown.
"""

import re
from pathlib import Path
from typing import Dict, Generic, List, Optional, Type, TypeVar

import aiofiles
import aiofiles.os
from pydantic import ValidationError as PydanticValidationError

from ..models.base import TimestampedModel
from ..models.interview import InterviewSession
from ..models.metrics import PerformanceMetrics
from ..models.resume import Resume
from ..models.user import User
from ..utils.exceptions import DuplicateResourceError, NotFoundError, StorageError
from ..utils.logging import get_logger

RecordT = TypeVar("RecordT", bound=TimestampedModel)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class StorageInterface:
    """Abstract interface for raw document storage."""

    async def initialize(self) -> None:
        """Prepare the backend for use."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources."""
        raise NotImplementedError

    async def write(self, collection: str, record_id: str, payload: str) -> None:
        """Write a JSON document."""
        raise NotImplementedError

    async def read(self, collection: str, record_id: str) -> Optional[str]:
        """Read a JSON document, or None if it does not exist."""
        raise NotImplementedError

    async def exists(self, collection: str, record_id: str) -> bool:
        raise NotImplementedError

    async def list_ids(self, collection: str) -> List[str]:
        """List all document IDs in a collection."""
        raise NotImplementedError


class MemoryStorageBackend(StorageInterface):
    """In-process storage that keeps serialized documents in dictionaries.

    Documents are stored as JSON text, so callers never share mutable state
    with the store.
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, str]] = {}
        self.logger = get_logger(__name__)

    async def initialize(self) -> None:
        self.logger.info("MemoryStorageBackend initialized")

    async def close(self) -> None:
        self.logger.info("MemoryStorageBackend closed")

    async def write(self, collection: str, record_id: str, payload: str) -> None:
        self._collections.setdefault(collection, {})[record_id] = payload

    async def read(self, collection: str, record_id: str) -> Optional[str]:
        return self._collections.get(collection, {}).get(record_id)

    async def exists(self, collection: str, record_id: str) -> bool:
        return record_id in self._collections.get(collection, {})

    async def list_ids(self, collection: str) -> List[str]:
        return list(self._collections.get(collection, {}))


class FileStorageBackend(StorageInterface):
    """File-based storage using one JSON file per record."""

    def __init__(self, base_path: str = "data"):
        """Initialize the file storage backend.

        Args:
            base_path: Base directory for storing data files.
        """
        self.base_path = Path(base_path)
        self.logger = get_logger(__name__)

    async def initialize(self) -> None:
        """Create the base directory and verify it is writable."""
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            await self._verify_permissions()
            self.logger.info(f"FileStorageBackend initialized at {self.base_path}")
        except OSError as e:
            self.logger.error(f"Failed to initialize FileStorageBackend: {str(e)}")
            raise StorageError(f"Storage initialization failed: {str(e)}", file_path=str(self.base_path))

    async def close(self) -> None:
        self.logger.info("FileStorageBackend closed")

    async def _verify_permissions(self) -> None:
        """Verify that the storage directory can be written and read back."""
        test_file = self.base_path / ".test_write"
        async with aiofiles.open(test_file, "w", encoding="utf-8") as f:
            await f.write("test")
        async with aiofiles.open(test_file, "r", encoding="utf-8") as f:
            content = await f.read()
        await aiofiles.os.remove(test_file)
        if content != "test":
            raise StorageError("Storage permission verification failed", file_path=str(test_file))

    def _record_path(self, collection: str, record_id: str) -> Path:
        return self.base_path / collection / f"{record_id}.json"

    async def write(self, collection: str, record_id: str, payload: str) -> None:
        record_file = self._record_path(collection, record_id)
        temp_file = record_file.with_suffix(".json.tmp")
        try:
            record_file.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                await f.write(payload)
            # Replace so readers never observe a partially written record
            await aiofiles.os.replace(temp_file, record_file)
        except OSError as e:
            self.logger.error(f"Failed to write {collection}/{record_id}: {str(e)}")
            raise StorageError(f"Record save failed: {str(e)}", file_path=str(record_file))

    async def read(self, collection: str, record_id: str) -> Optional[str]:
        record_file = self._record_path(collection, record_id)
        if not record_file.exists():
            return None
        try:
            async with aiofiles.open(record_file, "r", encoding="utf-8") as f:
                return await f.read()
        except OSError as e:
            self.logger.error(f"Failed to read {collection}/{record_id}: {str(e)}")
            raise StorageError(f"Record load failed: {str(e)}", file_path=str(record_file))

    async def exists(self, collection: str, record_id: str) -> bool:
        return self._record_path(collection, record_id).exists()

    async def list_ids(self, collection: str) -> List[str]:
        collection_path = self.base_path / collection
        if not collection_path.exists():
            return []
        return [f.stem for f in collection_path.glob("*.json")]


class RecordStore(Generic[RecordT]):
    """Typed create/read/update access to one collection."""

    def __init__(self, backend: StorageInterface, collection: str, model: Type[RecordT], label: str):
        self.backend = backend
        self.collection = collection
        self.model = model
        self.label = label
        self.logger = get_logger(f"store.{collection}")

    def _not_found(self, record_id: str) -> NotFoundError:
        return NotFoundError(f"{self.label} not found", resource_type=self.label, resource_id=record_id)

    def _load(self, record_id: str, payload: str) -> RecordT:
        try:
            return self.model.model_validate_json(payload)
        except PydanticValidationError as e:
            self.logger.error(f"Corrupt {self.label} record {record_id}: {str(e)}")
            raise StorageError(f"{self.label} record {record_id} is corrupt")

    async def create(self, record: RecordT) -> RecordT:
        """Persist a new record.

        Raises:
            DuplicateResourceError: If a record with the same ID exists.
        """
        if await self.backend.exists(self.collection, record.id):
            raise DuplicateResourceError(f"{self.label} already exists", resource_type=self.label, resource_id=record.id)
        await self.backend.write(self.collection, record.id, record.model_dump_json())
        self.logger.debug(f"{self.label} {record.id} created")
        return record

    async def get(self, record_id: str) -> Optional[RecordT]:
        """Load a record by ID, or None if it does not exist."""
        if not isinstance(record_id, str) or not _SAFE_ID.match(record_id):
            return None
        payload = await self.backend.read(self.collection, record_id)
        if payload is None:
            return None
        return self._load(record_id, payload)

    async def require(self, record_id: str) -> RecordT:
        """Load a record by ID.

        Raises:
            NotFoundError: If the record does not exist.
        """
        record = await self.get(record_id)
        if record is None:
            raise self._not_found(record_id)
        return record

    async def update(self, record: RecordT) -> RecordT:
        """Overwrite an existing record.

        Raises:
            NotFoundError: If the record does not exist.
        """
        if not await self.backend.exists(self.collection, record.id):
            raise self._not_found(record.id)
        record.update_timestamp()
        await self.backend.write(self.collection, record.id, record.model_dump_json())
        self.logger.debug(f"{self.label} {record.id} updated")
        return record

    async def list_all(self) -> List[RecordT]:
        records = []
        for record_id in await self.backend.list_ids(self.collection):
            record = await self.get(record_id)
            if record is not None:
                records.append(record)
        return records

    async def list_by_user(self, user_id: str) -> List[RecordT]:
        """List records owned by a user, newest first."""
        records = [r for r in await self.list_all() if getattr(r, "user_id", None) == user_id]
        return sorted(records, key=lambda r: r.created_at, reverse=True)


class AccountStore(RecordStore[User]):
    """User accounts, with lookup by email."""

    def __init__(self, backend: StorageInterface):
        super().__init__(backend, "accounts", User, "User")

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in await self.list_all():
            if user.email == email:
                return user
        return None


class MetricsStore(RecordStore[PerformanceMetrics]):
    """Performance metrics, stored under the owning user's ID."""

    def __init__(self, backend: StorageInterface):
        super().__init__(backend, "metrics", PerformanceMetrics, "Performance metrics")

    async def for_user(self, user_id: str) -> PerformanceMetrics:
        return await self.require(user_id)


class StorageManager:
    """Main storage manager that provides the typed stores."""

    def __init__(self, storage_type: str = "file", **kwargs):
        """Initialize the storage manager.

        Args:
            storage_type: Type of storage to use ("file" or "memory").
            **kwargs: Additional backend configuration parameters.
        """
        self.storage_type = storage_type
        self.logger = get_logger(__name__)
        self._open = False

        if storage_type == "file":
            self.storage_interface: StorageInterface = FileStorageBackend(**kwargs)
        elif storage_type == "memory":
            self.storage_interface = MemoryStorageBackend()
        else:
            raise ValueError(f"Unsupported storage type: {storage_type}")

        self._accounts = AccountStore(self.storage_interface)
        self._sessions = RecordStore(self.storage_interface, "sessions", InterviewSession, "Interview session")
        self._metrics = MetricsStore(self.storage_interface)
        self._resumes = RecordStore(self.storage_interface, "resumes", Resume, "Resume")

    async def initialize(self) -> None:
        """Open the storage backend."""
        if self._open:
            return
        await self.storage_interface.initialize()
        self._open = True
        self.logger.info(f"StorageManager initialized ({self.storage_type})")

    async def close(self) -> None:
        """Close the storage backend."""
        if not self._open:
            return
        await self.storage_interface.close()
        self._open = False
        self.logger.info("StorageManager closed")

    async def __aenter__(self) -> "StorageManager":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._open

    def _ensure_open(self) -> None:
        if not self._open:
            raise StorageError("Storage manager is not initialized")

    @property
    def accounts(self) -> AccountStore:
        self._ensure_open()
        return self._accounts

    @property
    def sessions(self) -> RecordStore[InterviewSession]:
        self._ensure_open()
        return self._sessions

    @property
    def metrics(self) -> MetricsStore:
        self._ensure_open()
        return self._metrics

    @property
    def resumes(self) -> RecordStore[Resume]:
        self._ensure_open()
        return self._resumes
