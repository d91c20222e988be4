import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).parent / ".env")

DATA_DIR = Path(__file__).parent / "data"


# ---------------------------------------------------------------------------
# Environment-driven settings
# ---------------------------------------------------------------------------
# IANA zone name used for every calendar-day computation. Empty = device-local.
TIMEZONE: str = os.getenv("PETDAY_TIMEZONE", "")
SNAPSHOT_PATH: str = os.getenv("PETDAY_SNAPSHOT_PATH") or str(
    DATA_DIR / "sample_snapshot.json"
)
LOG_LEVEL: str = (os.getenv("PETDAY_LOG_LEVEL") or "WARNING").upper()
RECENT_BADGES_LIMIT: int = int(os.getenv("PETDAY_RECENT_BADGES") or "5")

# ---------------------------------------------------------------------------
# Time windows
# ---------------------------------------------------------------------------
WEEK_WINDOW_DAYS = 7
MONTH_WINDOW_DAYS = 30
STREAK_LOOKBACK_DAYS = 30    # streak walk never looks further back
FIRST_WEEK_DAYS = 7          # "first_week" time condition

# ---------------------------------------------------------------------------
# Age groups (age in months, inclusive upper bounds)
# ---------------------------------------------------------------------------
CHIOT_MAX_MONTHS = 12
ADULTE_MAX_MONTHS = 84

# ---------------------------------------------------------------------------
# Streak rules
# ---------------------------------------------------------------------------
# Generic streak: any of these on a day breaks the streak
STREAK_ACCIDENT_ACTION_IDS = frozenset({2, 104})
# Clean streak: accidents (indoor / age-related) and the actions that count as clean
CLEAN_STREAK_ACCIDENT_ACTION_IDS = frozenset({2, 104, 314})
CLEAN_STREAK_CLEAN_ACTION_IDS = frozenset({1, 101, 103, 310})
