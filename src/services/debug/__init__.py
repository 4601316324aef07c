"""Debug feedback package."""

from src.services.debug.feedback import DebugFeedbackLogger

__all__ = ["DebugFeedbackLogger"]
