"""
Bounded-concurrency batch scheduling of chunk translations.

Chunks are sent in windows of at most ``max_concurrent`` requests. Each
window is awaited as a whole, then a short delay is observed before the
next one to stay polite with rate-limited backends.
"""
import asyncio
from typing import Callable, List, Optional

from epub_scribe.config import BATCH_DELAY, MAX_CONCURRENT
from epub_scribe.core.backends.client import TranslationClient, TranslationOutcome
from epub_scribe.utils.unified_logger import error


class BatchScheduler:
    """Runs chunk translations window by window, preserving order."""

    def __init__(self, client: TranslationClient,
                 max_concurrent: int = MAX_CONCURRENT,
                 batch_delay: float = BATCH_DELAY,
                 on_chunk_done: Optional[Callable[[TranslationOutcome], None]] = None):
        """
        Args:
            client: Translation client used for every chunk
            max_concurrent: Max requests in flight at once
            batch_delay: Seconds to wait between windows
            on_chunk_done: Called with each outcome as it lands
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self.client = client
        self.max_concurrent = max_concurrent
        self.batch_delay = batch_delay
        self.on_chunk_done = on_chunk_done

    async def _translate_one(self, index: int, chunk: str,
                             source_language: str, target_language: str) -> TranslationOutcome:
        try:
            outcome = await self.client.translate_chunk(index, chunk, source_language, target_language)
        except Exception as e:
            error(f"❌ Chunk {index}: unexpected error, keeping original: {e}")
            outcome = TranslationOutcome(index=index, text=chunk, success=False,
                                         attempts=0, error=str(e))

        if self.on_chunk_done:
            try:
                self.on_chunk_done(outcome)
            except Exception as e:
                error(f"❌ Chunk callback failed: {e}")
        return outcome

    async def translate_outcomes(self, chunks: List[str], source_language: str,
                                 target_language: str) -> List[TranslationOutcome]:
        """
        Translate every chunk.

        Args:
            chunks: Chunk texts in document order
            source_language: Source language code
            target_language: Target language code

        Returns:
            One outcome per chunk, in input order
        """
        results: List[Optional[TranslationOutcome]] = [None] * len(chunks)

        for start in range(0, len(chunks), self.max_concurrent):
            if start > 0 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

            window = range(start, min(start + self.max_concurrent, len(chunks)))
            outcomes = await asyncio.gather(*[
                self._translate_one(i, chunks[i], source_language, target_language)
                for i in window
            ])
            for i, outcome in zip(window, outcomes):
                results[i] = outcome

        return results

    async def translate_all(self, chunks: List[str], source_language: str,
                            target_language: str) -> List[str]:
        """Translate every chunk and return the texts in input order."""
        outcomes = await self.translate_outcomes(chunks, source_language, target_language)
        return [outcome.text for outcome in outcomes]
