"""Centralized constants for runedeck.

All scheduling and queue defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 86_400_000

# ---------- Scheduler ----------
DEFAULT_MIN_EASE = 1.3
INITIAL_EASE = 2.5
AGAIN_EASE_PENALTY = 0.2
DEFAULT_HARD_INTERVAL_DAYS = 1
DEFAULT_GOOD_INTERVAL_DAYS = 1
DEFAULT_EASY_INTERVAL_DAYS = 2
DEFAULT_EASY_BONUS = 1.3

# ---------- Stages ----------
RETENTION_MIN_INTERVAL_DAYS = 7

# ---------- Queue Builder ----------
DEFAULT_DUE_LIMIT = 20
DEFAULT_NEW_PER_DAY = 10
DEFAULT_LEECH_THRESHOLD = 8
