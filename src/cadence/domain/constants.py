"""Centralized constants for the Cadence scheduler.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Easiness factor ----------
MIN_EASINESS_FACTOR = 1.3
INITIAL_EASINESS_FACTOR = 2.5
LAPSE_EASINESS_PENALTY = 0.2

# ---------- Learning steps ----------
LEARNING_STEPS_MINUTES = (1, 10)
RELEARNING_STEPS_MINUTES = (10,)

# ---------- Intervals (days) ----------
GRADUATING_INTERVAL_DAYS = 1
EASY_GRADUATING_INTERVAL_DAYS = 4
SECOND_REVIEW_INTERVAL_DAYS = 6
HARD_INTERVAL_MULTIPLIER = 1.2
EASY_INTERVAL_MULTIPLIER = 1.3

# ---------- Study queue ----------
DEFAULT_QUEUE_LIMIT = 20
MAX_QUEUE_LIMIT = 50

# ---------- Config ----------
ENV_PREFIX = "CADENCE_"
CONFIG_DIR_NAME = ".config/cadence"
