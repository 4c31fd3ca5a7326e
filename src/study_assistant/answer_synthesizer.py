"""
Grounded answer generation using Claude with retrieved study material.
"""
import os
import threading
import time
from typing import List, Optional

import anthropic
from loguru import logger

from .error_classifier import is_rate_limit_error, simplify_error
from .errors import GenerationError, GenerationRetriesExhausted, InvalidRequest
from .ingestion_pipeline import check_cancelled
from .rag.embedding_service import EmbeddingService
from .rag.types import ChatAnswer, ChatStage, RetrievedChunk
from .rag.vector_store import VectorStore

FALLBACK_PHRASE = (
    "I couldn't find the answer in your notes, but here is what I know generally:"
)


def build_context(chunks: List[RetrievedChunk]) -> str:
    """Chunk texts joined by blank lines; empty when nothing matched."""
    return "\n\n".join(chunk.content for chunk in chunks)


def build_system_prompt(context: str) -> str:
    """System instruction grounding the model in the retrieved context."""
    return f"""You are a helpful study assistant. Use the following context from the user's study materials to answer their question.
If the answer is not in the context, say "{FALLBACK_PHRASE}" and then answer from your general knowledge.
Always cite the source concept if possible.

Context:
{context}"""


def get_api_key() -> Optional[str]:
    """Get the Claude API key from the environment."""
    api_key = os.getenv('CLAUDE_API_KEY') or os.getenv('ANTHROPIC_API_KEY')
    if not api_key:
        logger.error("Claude API key not found. Set CLAUDE_API_KEY or ANTHROPIC_API_KEY.")
    return api_key


class AnswerSynthesizer:
    """
    Answers a question from a subject's stored chunks.

    Rate-limited model calls are retried with exponential backoff; any other
    model failure is raised at once.
    """

    def __init__(
        self,
        embedder: EmbeddingService,
        vector_store: VectorStore,
        client: Optional[anthropic.Anthropic] = None,
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 2000,
        similarity_threshold: float = 0.5,
        top_k: int = 5,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        timeout: float = 60.0,
    ):
        """
        Args:
            embedder: Embeds the query
            vector_store: Chunk store searched per subject
            client: Anthropic client (default: built from CLAUDE_API_KEY)
            model: Claude model name
            max_tokens: Answer token cap
            similarity_threshold: Minimum chunk similarity
            top_k: Maximum chunks placed in context
            max_attempts: Attempts made when rate limited
            base_delay: Seconds waited after the first rate-limited attempt
            timeout: Client request timeout in seconds
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.embedder = embedder
        self.vector_store = vector_store
        self.model = model
        self.max_tokens = max_tokens
        self.similarity_threshold = similarity_threshold
        self.top_k = top_k
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.client = client
        if self.client is None:
            api_key = get_api_key()
            if api_key:
                # Retries are handled here, not by the SDK
                self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def answer(
        self,
        query: str,
        subject_id: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChatAnswer:
        """
        Produce a grounded answer for a question about a subject.

        Args:
            query: The user's question
            subject_id: Subject whose materials are searched
            cancel_event: Checked before each external call

        Returns:
            ChatAnswer with the model's text and the chunks used

        Raises:
            InvalidRequest: Empty query
            EmbeddingServiceError: Query could not be embedded
            RetrievalError: Store search failed
            GenerationError: Model failed with a non-rate-limit error
            GenerationRetriesExhausted: Every attempt was rate limited
            OperationCancelled: Cancel event was set
        """
        if not query or not query.strip():
            raise InvalidRequest("Message is required")

        stage = ChatStage.EMBEDDING
        try:
            check_cancelled(cancel_event, "query embedding")
            query_vector = self.embedder.embed(query)

            stage = ChatStage.RETRIEVING
            check_cancelled(cancel_event, "retrieval")
            sources = self.vector_store.search(
                subject_id,
                query_vector,
                threshold=self.similarity_threshold,
                top_k=self.top_k,
            )
            logger.info(f"Retrieved {len(sources)} chunks for subject {subject_id}")

            stage = ChatStage.SYNTHESIZING
            system_prompt = build_system_prompt(build_context(sources))
            text = self.generate_with_retry(system_prompt, query, cancel_event)
        except Exception as e:
            logger.error(f"Chat {ChatStage.FAILED.value} during {stage.value}: {simplify_error(str(e))}")
            raise

        logger.debug(f"Chat {ChatStage.DONE.value}: {len(text)} chars")
        return ChatAnswer(query=query, answer=text, sources=sources)

    def generate_with_retry(
        self,
        system_prompt: str,
        query: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Call the model, retrying only on rate limiting.

        Waits ``base_delay * 2 ** (attempt - 1)`` seconds between attempts
        and never after the last one.
        """
        if self.client is None:
            raise GenerationError("Anthropic API key not configured")

        for attempt in range(1, self.max_attempts + 1):
            check_cancelled(cancel_event, f"generation attempt {attempt}")
            try:
                message = self.client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=system_prompt,
                    messages=[{
                        "role": "user",
                        "content": query
                    }]
                )
                return message.content[0].text

            except Exception as e:
                if not is_rate_limit_error(e):
                    raise GenerationError(f"Failed to generate response: {simplify_error(str(e))}") from e

                if attempt == self.max_attempts:
                    raise GenerationRetriesExhausted(
                        f"Model still rate limited after {attempt} attempts",
                        attempts=attempt,
                    ) from e

                delay = self.base_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"Rate limited (attempt {attempt}/{self.max_attempts}), retrying in {delay:.0f}s"
                )
                time.sleep(delay)

        raise GenerationRetriesExhausted("No generation attempts made", attempts=0)
