"""Export of memo texts and recordings."""

from .exporter import MemoExporter

__all__ = ["MemoExporter"]
