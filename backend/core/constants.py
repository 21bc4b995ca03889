"""
Core constants: **Single Source of Truth** for project-wide magic numbers.

Any listing size or reporting window that appears in more than one
service or view should import it from here instead of hardcoding.
"""

# ── Listings ────────────────────────────────────────────────────────
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100

# ── Dashboards ──────────────────────────────────────────────────────
CITIZEN_RECENT_COMPLAINTS: int = 5
STAFF_RECENT_COMPLAINTS: int = 10

# ── Reports ─────────────────────────────────────────────────────────
# Length of the daily trend, in calendar days ending today.
TREND_DAYS: int = 7
TOP_OFFICERS_LIMIT: int = 5
REPORT_RECENT_COMPLAINTS: int = 10

# ── Comments ────────────────────────────────────────────────────────
COMMENT_MAX_LENGTH: int = 1000
