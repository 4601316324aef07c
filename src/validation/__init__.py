"""Draft validation package."""

from src.validation.validator import DraftValidator

__all__ = ["DraftValidator"]
