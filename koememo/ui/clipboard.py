"""Clipboard copy for memo texts."""

import logging
import pyperclip

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard.

    Returns:
        True on success, False when no clipboard mechanism is available
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.error(f"Clipboard copy failed: {e}")
        return False
    logger.debug(f"Copied {len(text)} chars to clipboard")
    return True
