"""Queries package."""

from src.queries.summary import UNCATEGORIZED_LABEL, SpendSummaryExecutor

__all__ = ["UNCATEGORIZED_LABEL", "SpendSummaryExecutor"]
