"""Terminal presentation for koememo."""

from .memo_screen import MemoScreen
from .clipboard import copy_to_clipboard
from .line_reader import LineReader

__all__ = ["MemoScreen", "copy_to_clipboard", "LineReader"]
