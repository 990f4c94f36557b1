"""
Chunk Dispatcher
================
Translates chunks concurrently through a fixed pool of asyncio workers.
"""
import asyncio
from typing import Awaitable, Callable, List, Sequence

from trados_translator.config import config
from trados_translator.errors import ProviderCallError, RateLimited
from trados_translator.models.translation import Chunk, ChunkResult
from trados_translator.utils.logging import get_channel, debug_print
from trados_translator.utils.text_processing import CHUNK_JOINER

TranslateOne = Callable[[str], Awaitable[str]]


def failure_placeholder(chunk: Chunk) -> str:
    return f"[ERROR in chunk {chunk.index + 1}] {chunk.text}"


def join_results(results: Sequence[ChunkResult]) -> str:
    """Reassemble chunk outputs in index order."""
    return CHUNK_JOINER.join(r.text for r in sorted(results, key=lambda r: r.index))


class ChunkDispatcher:
    """
    Bounded-concurrency translator for an ordered list of chunks.

    At most ``max_concurrency`` provider calls are in flight; a worker takes
    the next queued chunk as soon as it finishes one. Each chunk is retried up
    to ``max_attempts`` times. A chunk that never succeeds yields a failure
    placeholder instead of raising, so one bad chunk never aborts the job.
    """

    def __init__(
        self,
        max_concurrency: int = None,
        max_attempts: int = None,
        retry_delay: float = None,
        rate_limit_delay: float = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        settings = config.translation
        self.max_concurrency = max_concurrency or settings.max_concurrency
        self.max_attempts = max_attempts or settings.max_attempts
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self.rate_limit_delay = settings.rate_limit_delay if rate_limit_delay is None else rate_limit_delay
        self._sleep = sleep
        self.logger = get_channel('dispatch')

        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def backoff(self, error: Exception, attempt: int) -> float:
        """Delay before retrying after ``attempt`` failed with ``error``."""
        if isinstance(error, RateLimited):
            return self.rate_limit_delay * attempt
        return self.retry_delay * attempt

    async def translate_chunk(self, chunk: Chunk, translate_one: TranslateOne) -> ChunkResult:
        """Translate one chunk with retries; never raises for provider failures."""
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                text = await translate_one(chunk.text)
                debug_print(f"Chunk {chunk.index + 1} done (attempt {attempt})", 'dispatch', 'DEBUG')
                return ChunkResult(index=chunk.index, text=text, success=True, attempts=attempt)
            except ProviderCallError as e:
                last_error = e
                self.logger.warning(
                    f"Chunk {chunk.index + 1} failed (attempt {attempt}/{self.max_attempts}): {e}"
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.backoff(e, attempt))

        self.logger.error(f"Chunk {chunk.index + 1} permanently failed: {last_error}")
        return ChunkResult(
            index=chunk.index,
            text=failure_placeholder(chunk),
            success=False,
            attempts=self.max_attempts,
            error=str(last_error)
        )

    async def translate_all(self, chunks: Sequence[Chunk], translate_one: TranslateOne) -> List[ChunkResult]:
        """
        Translate every chunk.

        Returns:
            Exactly one result per chunk, sorted by chunk index
        """
        if not chunks:
            return []

        queue: asyncio.Queue = asyncio.Queue()
        for chunk in chunks:
            queue.put_nowait(chunk)

        results: List[ChunkResult] = []

        async def worker(worker_id: int):
            while True:
                try:
                    chunk = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    results.append(await self.translate_chunk(chunk, translate_one))
                finally:
                    queue.task_done()

        worker_count = min(self.max_concurrency, len(chunks))
        self.logger.info(f"Dispatching {len(chunks)} chunks to {worker_count} workers")
        await asyncio.gather(*(worker(i) for i in range(worker_count)))

        results.sort(key=lambda r: r.index)
        failed = sum(1 for r in results if r.failed)
        self.logger.info(f"All chunks finished: {len(results) - failed} ok, {failed} failed")
        return results
