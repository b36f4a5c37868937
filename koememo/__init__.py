"""koememo - record a voice memo, transcribe it, and tidy up the text."""

__version__ = "0.1.0"
