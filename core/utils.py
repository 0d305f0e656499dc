"""
Timezone utility functions for consistent date handling across the application.
"""
from datetime import datetime

from django.utils import timezone


def get_local_now():
    """
    Get current datetime in the practice timezone (settings.TIME_ZONE).
    
    Returns:
        datetime: Current datetime localized to the practice timezone
    """
    return timezone.localtime(timezone.now())


def get_local_today():
    """
    Get today's date in the practice timezone.
    
    Returns:
        date: Today's date in the practice timezone
    """
    return get_local_now().date()


def get_month_start(day=None):
    """First day of the month containing ``day`` (defaults to today)."""
    day = day or get_local_today()
    return day.replace(day=1)


def parse_iso_date(value, default=None):
    """
    Parse a YYYY-MM-DD string.
    
    Args:
        value: Date string (may be empty or None)
        default: Returned when the value is missing or malformed
        
    Returns:
        date or default
    """
    if not value:
        return default
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (ValueError, TypeError):
        return default
