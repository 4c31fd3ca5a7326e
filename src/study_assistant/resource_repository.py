"""
Resource record storage.

Resources are persisted to a JSON file so a subject's materials survive
restarts. Deleting a resource cascades to its chunks in the vector store.
"""
import json
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from loguru import logger

from .rag.types import Resource, ResourceKind


class ResourceRepository(Protocol):
    """Interface the ingestion pipeline needs from resource storage."""

    def create(
        self,
        subject_id: str,
        title: str,
        kind: ResourceKind,
        url: Optional[str],
        content_summary: str,
    ) -> Resource:
        ...

    def get(self, resource_id: str) -> Optional[Resource]:
        ...

    def list_by_subject(self, subject_id: str) -> List[Resource]:
        ...

    def delete(self, resource_id: str) -> bool:
        ...


class ChunkDeleter(Protocol):
    def delete_by_resource_id(self, resource_id: str) -> int:
        ...


class JsonResourceRepository:
    """
    Thread-safe JSON-file resource repository.

    Writes go to a temp file that is atomically renamed over the store.
    """

    def __init__(self, store_file: Path, chunk_store: Optional[ChunkDeleter] = None):
        """
        Args:
            store_file: Path to JSON file (created on first write)
            chunk_store: Vector store whose chunks are removed with their resource
        """
        self.store_file = Path(store_file)
        self.chunk_store = chunk_store
        self._lock = threading.Lock()
        self._resources: Dict[str, Dict] = {}
        self._load()

    def _load(self) -> None:
        if not self.store_file.exists():
            logger.debug("Resource store does not exist yet, starting empty")
            return
        try:
            with open(self.store_file, 'r', encoding='utf-8') as f:
                self._resources = json.load(f)
            logger.debug(f"Loaded {len(self._resources)} resources from {self.store_file}")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load resource store: {e}. Starting fresh.")
            self._resources = {}

    def _save(self) -> None:
        self.store_file.parent.mkdir(parents=True, exist_ok=True)

        temp_file = self.store_file.with_suffix('.tmp')
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(self._resources, f, indent=2, ensure_ascii=False)

        temp_file.replace(self.store_file)

    def create(
        self,
        subject_id: str,
        title: str,
        kind: ResourceKind,
        url: Optional[str],
        content_summary: str,
    ) -> Resource:
        """Create and persist a resource record."""
        resource = Resource(
            id=str(uuid.uuid4()),
            subject_id=subject_id,
            title=title,
            kind=kind,
            url=url,
            content_summary=content_summary,
        )
        with self._lock:
            self._resources[resource.id] = resource.to_dict()
            self._save()

        logger.info(f"Created {kind.value} resource {resource.id} for subject {subject_id}")
        return resource

    def get(self, resource_id: str) -> Optional[Resource]:
        data = self._resources.get(resource_id)
        return Resource.from_dict(data) if data else None

    def list_by_subject(self, subject_id: str) -> List[Resource]:
        """Resources of a subject, newest first."""
        with self._lock:
            matching = [
                Resource.from_dict(data)
                for data in self._resources.values()
                if data['subject_id'] == subject_id
            ]
        matching.sort(key=lambda r: r.created_at, reverse=True)
        return matching

    def delete(self, resource_id: str) -> bool:
        """
        Delete a resource and its chunks.

        Chunks are removed first; if that fails the record is kept and the
        error propagates.

        Returns:
            True if the resource existed
        """
        if resource_id not in self._resources:
            return False

        if self.chunk_store is not None:
            removed = self.chunk_store.delete_by_resource_id(resource_id)
            logger.debug(f"Removed {removed} chunks for resource {resource_id}")

        with self._lock:
            self._resources.pop(resource_id, None)
            self._save()

        logger.info(f"Deleted resource {resource_id}")
        return True
