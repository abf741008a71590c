"""
Data models for storage layer.

Defines database entities and data structures.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UsageLogEntry:
    """Append-only record of words charged to a user for one feature call."""
    timestamp: datetime
    user_id: int
    feature: str
    units: int
