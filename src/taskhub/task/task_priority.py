"""Importance tiers of a task."""

from enum import StrEnum

__all__ = ["TaskPriority"]


class TaskPriority(StrEnum):
    """Priority of a task."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
