"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("PLANNER_DB_PATH", str(PROJECT_ROOT / "data" / "db" / "planner.db"))
)

# =============================================================================
# CALENDAR GRID
# =============================================================================

DAYS_PER_WEEK = 7
MONTH_GRID_WEEKS = 6  # Month view always renders 6 week rows (42 cells)
MAX_VISIBLE_LAYERS = 4  # Continuous view collapses rows beyond this many layers
MONTHS_TO_RENDER = 12
MONTHS_BEFORE = 6  # Continuous view: 6 months before the anchor, anchor, 5 after

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# =============================================================================
# INTERACTION
# =============================================================================

DRAG_THRESHOLD = 5  # Pointer travel before a press turns into a move
DEFAULT_SCHEDULE_DAYS = 1  # Span given to items dropped from the unscheduled list

# =============================================================================
# CASCADE
# =============================================================================

CASCADE_CLAMP = os.environ.get("CASCADE_CLAMP", "true").lower() == "true"

# =============================================================================
# EVENT COLORS
# =============================================================================

TASK_COLOR = "#3b82f6"
COMPLETED_COLOR = "#10b981"
CAMPAIGN_COLOR = "#f97316"
PROJECT_COLOR = "#8b5cf6"
STAGE_COLOR = "#6366f1"

# =============================================================================
# API CONFIGURATION
# =============================================================================

PLANNER_API_KEY = os.environ.get("PLANNER_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
