"""Live stream transcription with translation fan-out."""

__version__ = "0.1.0"
