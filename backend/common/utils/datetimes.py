"""
Date/time helpers.

Rides and ride requests keep a calendar day and a time-of-day as separate columns
(that is what clients send), but every comparison is done on one combined,
timezone-aware datetime built here.
"""

from datetime import date, datetime, time
from typing import Union

from django.utils import timezone


def combine_departure(day: date, time_of_day: Union[time, datetime]) -> datetime:
    """
    Combine a calendar day and a time-of-day into an aware datetime.

    Args:
        day: Departure date
        time_of_day: Departure time. A datetime is accepted too; only its
            time part is used.

    Returns:
        Aware datetime in the current timezone
    """
    if isinstance(time_of_day, datetime):
        if timezone.is_aware(time_of_day):
            time_of_day = timezone.localtime(time_of_day)
        time_of_day = time_of_day.time()
    naive = datetime.combine(day, time_of_day.replace(tzinfo=None))
    return timezone.make_aware(naive, timezone.get_current_timezone())

