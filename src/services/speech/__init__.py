"""Transcript source package."""

from src.services.speech.interface import (
    RECOGNITION_ERROR_MESSAGES,
    BaseTranscriptSource,
    TranscriptSourceError,
    TranscriptSourceInterface,
    TranscriptState,
    TranscriptStatus,
)
from src.services.speech.sources import ScriptedTranscriptSource, TypedTranscriptSource

__all__ = [
    "RECOGNITION_ERROR_MESSAGES",
    "BaseTranscriptSource",
    "ScriptedTranscriptSource",
    "TranscriptSourceError",
    "TranscriptSourceInterface",
    "TranscriptState",
    "TranscriptStatus",
    "TypedTranscriptSource",
]
