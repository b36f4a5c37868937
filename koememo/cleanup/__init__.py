"""Transcript post-processing: filler removal and model correction."""

from .filler import FillerRemover, build_filler_patterns, FILLER_TOKENS
from .corrector import TranscriptCorrector, CorrectionEngine
from .pipeline import PostProcessingPipeline, CONCURRENT, SEQUENTIAL

__all__ = [
    "FillerRemover",
    "build_filler_patterns",
    "FILLER_TOKENS",
    "TranscriptCorrector",
    "CorrectionEngine",
    "PostProcessingPipeline",
    "CONCURRENT",
    "SEQUENTIAL",
]
