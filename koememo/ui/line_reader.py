"""Single background reader for stdin, shared by every prompt of the screen."""

import sys
import queue
import logging
import threading
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class LineReader:
    """Reads lines from a stream on one daemon thread and hands them out in order.

    Waiting for Enter and answering prompts both go through ``readline``, so
    no line is taken by a reader nobody is listening to anymore. The object
    can be passed as ``stream`` to rich prompts.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdin
        self.lines: "queue.Queue[str]" = queue.Queue()
        self.thread: Optional[threading.Thread] = None
        self.at_eof = False

    def start(self) -> None:
        if self.thread is None:
            self.thread = threading.Thread(target=self._read_loop, daemon=True, name="StdinReader")
            self.thread.start()

    def _read_loop(self) -> None:
        while True:
            try:
                line = self.stream.readline()
            except (OSError, ValueError) as e:
                logger.debug(f"stdin closed: {e}")
                line = ""
            self.lines.put(line)
            if not line:
                return

    def readline(self, timeout: Optional[float] = None) -> Optional[str]:
        """Next line including its newline, '' at end of input, None on timeout."""
        if self.at_eof:
            return ""
        self.start()
        try:
            line = self.lines.get(timeout=timeout)
        except queue.Empty:
            return None
        if not line:
            self.at_eof = True
        return line
