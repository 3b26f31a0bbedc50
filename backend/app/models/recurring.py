"""
Recurring frequency enumeration.
"""

import enum


class Frequency(str, enum.Enum):
    """Recurring frequency enumeration."""
    daily = "daily"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"
    unknown = "unknown"
