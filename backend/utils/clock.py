from datetime import datetime
import os

import pytz
from dotenv import load_dotenv

load_dotenv()

APP_TIMEZONE = pytz.timezone(os.getenv("APP_TIMEZONE", "Africa/Cairo"))


def local_now() -> datetime:
    """Current time in the bakery's timezone."""
    return datetime.now(APP_TIMEZONE)


def to_local(value: datetime) -> datetime:
    """
    Normalise a datetime into the bakery's timezone.

    Naive values are taken to already be local wall-clock time, which is how
    the date pickers in the admin area send them.
    """
    if value.tzinfo is None:
        return APP_TIMEZONE.localize(value)
    return value.astimezone(APP_TIMEZONE)
