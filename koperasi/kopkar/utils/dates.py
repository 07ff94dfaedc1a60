# -*- coding: utf-8 -*-
"""Calendar helpers for payroll-driven schedules."""
import calendar
from datetime import date


def add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def clamp_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def next_payroll_date(today: date, cutoff_day: int, payroll_day: int) -> date:
    """Payroll date of this month, or next month when `today` is past the cutoff."""
    base = today if today.day <= cutoff_day else add_months(today.replace(day=1), 1)
    return clamp_day(base.year, base.month, payroll_day)


def cutoff_window(month: int, year: int, cutoff_day: int):
    """(start, end) of a payroll month: day after the previous cutoff through this cutoff."""
    end = clamp_day(year, month, cutoff_day)
    prev = add_months(date(year, month, 1), -1)
    start = date.fromordinal(clamp_day(prev.year, prev.month, cutoff_day).toordinal() + 1)
    return start, end
