"""Runs filler removal and correction over a raw transcript.

Both transforms derive from the same raw text and never see each other's
output. A failure in one branch is recorded on the result; the other branch's
text is kept.
"""

import asyncio
import logging
import time

from ..exceptions import DegenerateInputError
from ..models.transcription import PostProcessingResult, TextSlot
from .corrector import TranscriptCorrector
from .filler import FillerRemover

logger = logging.getLogger(__name__)

CONCURRENT = "concurrent"
SEQUENTIAL = "sequential"


class PostProcessingPipeline:
    """Filler removal plus model correction, concurrently or one after the other."""

    def __init__(self, filler_remover: FillerRemover, corrector: TranscriptCorrector,
                 mode: str = CONCURRENT):
        if mode not in (CONCURRENT, SEQUENTIAL):
            raise ValueError(f"Unknown pipeline mode: {mode}")
        self.filler_remover = filler_remover
        self.corrector = corrector
        self.mode = mode

    async def run(self, raw_text: str) -> PostProcessingResult:
        """Derive the filler-removed and corrected variants of raw_text.

        Raises:
            DegenerateInputError: raw_text is empty
        """
        if not raw_text or not raw_text.strip():
            raise DegenerateInputError("No transcript to post-process")

        start_time = time.time()
        result = PostProcessingResult(raw_text=raw_text)

        if self.mode == CONCURRENT:
            filler_outcome, corrected_outcome = await asyncio.gather(
                self._remove_fillers(raw_text),
                self.corrector.correct(raw_text),
                return_exceptions=True,
            )
        else:
            filler_outcome = await self._capture(self._remove_fillers(raw_text))
            corrected_outcome = await self._capture(self.corrector.correct(raw_text, combined=True))

        self._store(result, TextSlot.FILLER_REMOVED, filler_outcome)
        self._store(result, TextSlot.CORRECTED, corrected_outcome)

        logger.info(f"Post-processing ({self.mode}) finished in {time.time() - start_time:.2f}s; "
                    f"errors: {[slot.value for slot in result.errors]}")
        return result

    async def _remove_fillers(self, text: str) -> str:
        return self.filler_remover.remove(text)

    @staticmethod
    async def _capture(coroutine):
        try:
            return await coroutine
        except Exception as e:
            return e

    @staticmethod
    def _store(result: PostProcessingResult, slot: TextSlot, outcome: object) -> None:
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(f"{slot.value} failed: {outcome}")
            result.errors[slot] = str(outcome) or type(outcome).__name__
            return
        if slot is TextSlot.FILLER_REMOVED:
            result.filler_removed = outcome
        else:
            result.corrected = outcome

