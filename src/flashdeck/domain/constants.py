"""Centralized constants for flashdeck.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Review state defaults ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3

# ---------- Scheduler ----------
RELEARN_DELAY_MINUTES = 10
LAPSE_EASE_PENALTY = 0.2

EASE_DELTA_HARD = -0.15
EASE_DELTA_GOOD = -0.02
EASE_DELTA_EASY = 0.1

# Learning steps in days, keyed by rating value
FIRST_STEP_DAYS = {"hard": 1, "good": 1, "easy": 2}
SECOND_STEP_DAYS = {"hard": 2, "good": 3, "easy": 5}

# Review-phase interval multipliers
INTERVAL_MULTIPLIERS = {"hard": 1.15, "good": 1.4, "easy": 1.7}

# Intervals never grow past roughly a century
MAX_INTERVAL_DAYS = 36500

# ---------- Due queue ----------
DEFAULT_BATCH_SIZE = 20
MAX_BATCH_SIZE = 500
REFILL_LOW_WATER_MARK = 3

# ---------- Stats ----------
RECENT_DAYS_WINDOW = 7
MAX_STREAK_DAYS = 400

# ---------- Storage ----------
DEFAULT_BUSY_TIMEOUT = 5.0  # seconds
