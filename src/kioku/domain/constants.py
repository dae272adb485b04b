"""Centralized constants for the kioku application.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 24 * 60 * 60 * 1000
DUE_WINDOW_DAYS = 7

# ---------- SM-2 ----------
INITIAL_EASINESS = 2.5
MIN_EASINESS = 1.3
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1

# ---------- Review queue ----------
DEFAULT_QUEUE_LIMIT = 20

# ---------- Persistence ----------
DEFAULT_STORE_FILENAME = "deck.json"
