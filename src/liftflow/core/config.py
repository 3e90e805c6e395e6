"""
Configuration constants for the workout builder.

All adjustable parameters are centralized here for easy tuning.
User overrides are layered on top by core.engine.config_loader.
"""

from typing import Final

# =============================================================================
# STORAGE
# =============================================================================

APP_DIR_NAME: Final[str] = ".liftflow"  # Directory under $HOME for all files
HOME_ENV_VAR: Final[str] = "LIFTFLOW_HOME"  # Overrides the app directory
AUTOSAVE_FILENAME: Final[str] = "workout.json"
CONFIG_FILENAME: Final[str] = "config.yaml"

# Snapshot document version written by the serializer.
# Documents with a higher version are rejected on load.
STATE_VERSION: Final[int] = 1

# =============================================================================
# REST TIMER
# =============================================================================

DEFAULT_REST_SECONDS: Final[int] = 60  # Fallback when a duration cannot be parsed
TICK_SECONDS: Final[int] = 1  # Rest timer cadence

# =============================================================================
# BLOCKS
# =============================================================================

BLOCK_TYPES: Final[tuple[str, ...]] = ("round", "superset", "circuit")
DEFAULT_BLOCK_TYPE: Final[str] = "superset"
DEFAULT_ROUNDS: Final[int] = 1

# =============================================================================
# AUTO-FILL PROGRESSION
# =============================================================================

KG_INCREMENT: Final[float] = 5.0  # Per-round weight step for kilogram units
LB_INCREMENT: Final[float] = 10.0  # Per-round weight step for pound units
MIN_AUTO_REPS: Final[int] = 1  # Descending reps never go below this
