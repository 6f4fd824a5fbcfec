"""
Timezone utilities for the Rehome operations console.

"Today" for calendar classification is the date in the business timezone,
not the server's local date.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from .config import settings


def get_business_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """Return the configured business timezone (or an explicit override)."""
    return pytz.timezone(tz_name or settings.business_timezone)


def get_business_now(tz_name: Optional[str] = None) -> datetime:
    """Current datetime in the business timezone."""
    return datetime.now(get_business_timezone(tz_name))


def get_business_today(tz_name: Optional[str] = None) -> date:
    """Today's date in the business timezone."""
    return get_business_now(tz_name).date()
