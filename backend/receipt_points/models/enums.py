"""Enumeration types used throughout the receipt points service.

Enumerations make it easier to constrain the values that can be passed
through configuration or returned by the API.  They also improve
readability when dealing with domain concepts like scoring rules or
storage backends.
"""

from enum import Enum


class ScoringRule(str, Enum):
    """The fixed rules that make up a receipt's point total."""

    RETAILER_NAME = "retailer_name"
    ROUND_DOLLAR = "round_dollar"
    QUARTER_MULTIPLE = "quarter_multiple"
    ITEM_PAIRS = "item_pairs"
    DESCRIPTION_LENGTH = "description_length"
    ODD_DAY = "odd_day"
    AFTERNOON_WINDOW = "afternoon_window"


class StoreBackend(str, Enum):
    """Persistence backends for processed receipts."""

    MEMORY = "memory"
    DATABASE = "database"
