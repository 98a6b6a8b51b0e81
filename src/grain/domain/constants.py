"""Centralized constants for grain.

Defaults, thresholds and file names live here so every layer
imports from a single source of truth.
"""

# ---------- Config defaults ----------
DEFAULT_WEEKLY_GOAL = 90
DEFAULT_BREAK_START = 12

# ---------- Accounting ----------
SURPLUS_MULTIPLIER = 2  # break credits earned per study credit above goal
STREAK_LOOKBACK_YEARS = 5

# ---------- Formats ----------
DATE_FORMAT = "%Y-%m-%d"
BACKUP_NAME_FORMAT = "backup_%Y-%m-%d_%H-%M-%S.json"

# ---------- Files ----------
HOME_ENV_VAR = "GRAIN_HOME"
BASE_DIR_NAME = ".grain"
CONFIG_FILE_NAME = "config.json"
DATA_FILE_NAME = "data.json"
BACKUP_DIR_NAME = "backups"

# ---------- Confirmation phrases ----------
RESET_CONFIRMATION = "reset grain"
RESTORE_CONFIRMATION = "yes"
