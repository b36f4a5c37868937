"""Deterministic removal of Japanese filler words (えー, あの, えっと ...)."""

import re
import logging
from typing import List, Optional, Pattern, Sequence

from ..exceptions import DegenerateInputError

logger = logging.getLogger(__name__)

# Longer variants come before their prefixes so that e.g. "えーと" is not
# reduced to "と" by the "えー+" rule.
FILLER_TOKENS = (
    "えっとですね",
    "えっとー*",
    "えーと",
    "ええと",
    "あのー*",
    "うーん+",
    "あー+",
    "えー+",
    "うー+",
    "んー+",
    "ええ+",
    "まぁ+",
    "まあ",
    "その+ー*",
    "んと",
)

# Only removed together with their pause mark.
COMMA_ONLY_TOKENS = (
    "ま",
)

PAUSE_MARK = "、"
STOP_MARK = "。"

DEFAULT_MAX_ITERATIONS = 50


def build_filler_patterns(tokens: Sequence[str] = FILLER_TOKENS,
                          comma_only_tokens: Sequence[str] = COMMA_ONLY_TOKENS) -> List[Pattern]:
    """Compile the ordered rule list: every comma-attached variant, then the bare ones."""
    with_comma = [re.compile(token + PAUSE_MARK) for token in tokens]
    with_comma += [re.compile(token + PAUSE_MARK) for token in comma_only_tokens]
    bare = [re.compile(token) for token in tokens]
    return with_comma + bare


class FillerRemover:
    """Strips filler words from a transcript with ordered regex rules."""

    def __init__(self, patterns: Optional[List[Pattern]] = None,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        """Initialize filler remover.

        Args:
            patterns: Ordered substitution rules (defaults to build_filler_patterns())
            max_iterations: Guard for the repeat-until-stable loops
        """
        self.patterns = patterns if patterns is not None else build_filler_patterns()
        self.max_iterations = max_iterations

    def remove(self, text: str) -> str:
        """Return text with fillers removed and punctuation tidied.

        Raises:
            DegenerateInputError: input is empty, or nothing but fillers
        """
        if not text or not text.strip():
            raise DegenerateInputError("No text to remove fillers from")

        logger.debug(f"Filler removal start: {text[:100]}")
        cleaned = text
        for _ in range(self.max_iterations):
            updated = self._normalize(self._apply_rules(cleaned))
            if updated == cleaned:
                break
            cleaned = updated
        else:
            logger.warning(f"Filler removal did not settle after {self.max_iterations} passes")

        if not cleaned:
            raise DegenerateInputError("Filler removal left no text")

        logger.debug(f"Filler removal done: {cleaned[:100]}")
        return cleaned

    def _apply_rules(self, text: str) -> str:
        for pattern in self.patterns:
            for _ in range(self.max_iterations):
                text, count = pattern.subn("", text)
                if count == 0:
                    break
        return text

    @staticmethod
    def _normalize(text: str) -> str:
        text = re.sub(r"\s+", " ", text).strip()
        text = re.sub(PAUSE_MARK + "+", PAUSE_MARK, text)
        text = re.sub(STOP_MARK + "+", STOP_MARK, text)
        return text
