"""Display windows for the admin calendar (day / week / month views)"""

import calendar as month_calendar
from datetime import date, timedelta

CALENDAR_VIEWS = ("day", "week", "month")


def calendar_window(view: str, reference: date) -> tuple[date, date]:
    """
    Inclusive (start, end) dates shown by a calendar view around ``reference``.

    Weeks start on Monday; a month view covers the first to the last day of
    the reference month.
    """
    if view == "day":
        return reference, reference
    if view == "week":
        start = reference - timedelta(days=reference.weekday())
        return start, start + timedelta(days=6)
    if view == "month":
        days_in_month = month_calendar.monthrange(reference.year, reference.month)[1]
        start = reference.replace(day=1)
        return start, start + timedelta(days=days_in_month - 1)
    raise ValueError(f"Unknown calendar view: {view}. Expected one of {', '.join(CALENDAR_VIEWS)}")
