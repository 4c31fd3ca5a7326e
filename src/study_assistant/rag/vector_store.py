"""Vector store implementation using ChromaDB.

This module provides a wrapper around ChromaDB for storing chunk embeddings
scoped to a subject and searching them by cosine similarity.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import chromadb
from chromadb.config import Settings

from ..errors import RetrievalError
from .types import RetrievedChunk, utc_now_iso


logger = logging.getLogger(__name__)

# (chunk text, embedding vector)
ChunkRow = Tuple[str, Sequence[float]]


class VectorStore:
    """ChromaDB-based store for chunk embeddings.

    Chunks carry ``resource_id`` and ``subject_id`` metadata. Search is always
    scoped to one subject, and deleting a resource removes its chunks.

    Attributes:
        persist_dir: Directory to persist ChromaDB data
        collection_name: Name of the ChromaDB collection
    """

    def __init__(
        self,
        persist_dir: str,
        collection_name: str = "study_chunks",
    ):
        """Initialize the vector store.

        Args:
            persist_dir: Directory to persist ChromaDB data
            collection_name: Name of the collection (default: study_chunks)
        """
        self.persist_dir = Path(persist_dir)
        self.collection_name = collection_name
        self._client: Optional[Any] = None
        self._collection: Optional[Any] = None

        logger.info(f"VectorStore initialized: persist_dir={persist_dir}, collection={collection_name}")

    @property
    def client(self):
        """Lazy-load the persistent ChromaDB client.

        Raises:
            RuntimeError: If client initialization fails
        """
        if self._client is None:
            try:
                logger.info("Initializing ChromaDB client")
                self.persist_dir.mkdir(parents=True, exist_ok=True)
                self._client = chromadb.PersistentClient(
                    path=str(self.persist_dir),
                    settings=Settings(anonymized_telemetry=False),
                )
                logger.info("ChromaDB client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize ChromaDB client: {e}")
                raise RuntimeError(f"Could not initialize ChromaDB: {e}") from e

        return self._client

    @property
    def collection(self):
        """Get or create the cosine-space collection.

        Raises:
            RuntimeError: If collection access fails
        """
        if self._collection is None:
            try:
                logger.info(f"Getting or creating collection: {self.collection_name}")
                self._collection = self.client.get_or_create_collection(
                    name=self.collection_name,
                    metadata={
                        "hnsw:space": "cosine",
                        "description": "Study material chunk embeddings",
                    },
                )
                logger.info(f"Collection ready: {self.collection_name}")
            except Exception as e:
                logger.error(f"Failed to get/create collection: {e}")
                raise RuntimeError(f"Could not access collection: {e}") from e

        return self._collection

    def insert_chunks(
        self,
        resource_id: str,
        subject_id: str,
        rows: List[ChunkRow],
        start_index: int = 0,
    ) -> bool:
        """Insert a batch of chunks with pre-computed embeddings.

        The batch is written in one ``add`` call. Failures are logged and
        reported through the return value; the owning resource is untouched.

        Args:
            resource_id: Resource the chunks belong to
            subject_id: Subject used to scope retrieval
            rows: (content, embedding) pairs in source order
            start_index: chunk_index of the first row

        Returns:
            True if stored (or nothing to store), False on failure
        """
        if not rows:
            return True

        created_at = utc_now_iso()
        ids = []
        documents = []
        metadatas = []
        embeddings = []

        for offset, (content, embedding) in enumerate(rows):
            ids.append(f"{resource_id}_{uuid.uuid4().hex[:12]}")
            documents.append(content)
            metadatas.append({
                "resource_id": resource_id,
                "subject_id": subject_id,
                "chunk_index": start_index + offset,
                "created_at": created_at,
            })
            embeddings.append([float(x) for x in embedding])

        try:
            logger.info(f"Adding {len(rows)} chunks for resource {resource_id}")
            self.collection.add(
                ids=ids,
                documents=documents,
                metadatas=metadatas,
                embeddings=embeddings,
            )
            logger.info(f"Successfully added {len(rows)} chunks")
            return True

        except Exception as e:
            logger.error(f"Failed to add chunks for resource {resource_id}: {e}")
            return False

    def search(
        self,
        subject_id: str,
        query_vector: Sequence[float],
        threshold: float = 0.5,
        top_k: int = 5,
    ) -> List[RetrievedChunk]:
        """Find the chunks of a subject most similar to a query vector.

        Args:
            subject_id: Only chunks of this subject are considered
            query_vector: Query embedding
            threshold: Minimum cosine similarity (inclusive)
            top_k: Maximum number of chunks to return

        Returns:
            Chunks sorted by similarity descending; may be empty

        Raises:
            ValueError: If query_vector is empty
            RetrievalError: If the store query fails
        """
        if query_vector is None or len(query_vector) == 0:
            raise ValueError("Query vector cannot be empty")

        if top_k <= 0:
            return []

        try:
            logger.debug(f"Searching top {top_k} chunks for subject {subject_id}")
            results = self.collection.query(
                query_embeddings=[[float(x) for x in query_vector]],
                n_results=top_k,
                where={"subject_id": {"$eq": subject_id}},
                include=["documents", "metadatas", "distances"],
            )
        except Exception as e:
            logger.error(f"Search failed: {e}")
            raise RetrievalError(f"Similarity search failed: {e}") from e

        retrieved = []
        if results and results.get('ids') and len(results['ids']) > 0:
            ids = results['ids'][0]
            documents = results['documents'][0]
            metadatas = results['metadatas'][0]
            distances = results['distances'][0]

            for i in range(len(ids)):
                # Cosine distance in [0, 2]
                similarity = 1.0 - float(distances[i])
                if similarity < threshold:
                    continue
                metadata = metadatas[i] or {}
                retrieved.append(RetrievedChunk(
                    content=documents[i],
                    similarity=similarity,
                    resource_id=metadata.get('resource_id'),
                    chunk_id=ids[i],
                ))

        retrieved.sort(key=lambda chunk: chunk.similarity, reverse=True)
        logger.debug(f"Found {len(retrieved)} chunks above threshold {threshold}")
        return retrieved[:top_k]

    def delete_by_resource_id(self, resource_id: str) -> int:
        """Delete all chunks of a resource.

        Returns:
            Number of chunks deleted

        Raises:
            RetrievalError: If the store cannot be updated
        """
        try:
            results = self.collection.get(where={"resource_id": {"$eq": resource_id}})
            ids_to_delete = results['ids'] if results and results.get('ids') else []

            if ids_to_delete:
                self.collection.delete(ids=ids_to_delete)
                logger.info(f"Deleted {len(ids_to_delete)} chunks for resource {resource_id}")
            else:
                logger.info(f"No chunks found for resource {resource_id}")

            return len(ids_to_delete)

        except Exception as e:
            logger.error(f"Failed to delete chunks for resource {resource_id}: {e}")
            raise RetrievalError(f"Could not delete chunks: {e}") from e

    def count_for_resource(self, resource_id: str) -> int:
        """Number of chunks stored for a resource."""
        results = self.collection.get(where={"resource_id": {"$eq": resource_id}})
        return len(results['ids']) if results and results.get('ids') else 0

    def health_check(self) -> bool:
        """Check if the vector store is healthy and accessible."""
        try:
            count = self.collection.count()
            logger.info(f"Health check passed: collection has {count} chunks")
            return True
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False
