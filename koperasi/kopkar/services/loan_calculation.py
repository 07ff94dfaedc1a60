# -*- coding: utf-8 -*-
"""Flat-rate loan arithmetic and installment scheduling."""
from __future__ import annotations
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Any

from django.utils import timezone

from kopkar.utils.dates import add_months, next_payroll_date

WHOLE = Decimal("1")


def _round(value: Decimal) -> Decimal:
    return value.quantize(WHOLE, rounding=ROUND_HALF_UP)


def calculate(amount, tenor: int, interest_rate, shop_margin_rate=None) -> Dict[str, Decimal]:
    """
    total_interest = amount × rate% × tenor/12; an online purchase adds the
    shop margin on top. The monthly installment is the rounded total / tenor.
    """
    amount = Decimal(str(amount))
    rate = Decimal(str(interest_rate))
    total_interest = _round(amount * rate / 100 * Decimal(tenor) / 12)
    margin = _round(amount * Decimal(str(shop_margin_rate)) / 100) if shop_margin_rate else Decimal("0")
    total_repayment = amount + total_interest + margin
    monthly = _round(total_repayment / tenor) if tenor else Decimal("0")
    return {
        "loan_amount": amount,
        "loan_tenor": tenor,
        "interest_rate": rate,
        "total_interest": total_interest,
        "shop_margin_amount": margin,
        "total_repayment": total_repayment,
        "monthly_installment": monthly,
    }


def schedule(total_repayment: Decimal, tenor: int, disbursed_on: date, cutoff_day: int, payroll_day: int) -> List[Dict[str, Any]]:
    """
    One installment per month starting at the first payroll date after the
    disbursement; the last installment absorbs the rounding remainder.
    """
    monthly = _round(total_repayment / tenor)
    first_due = next_payroll_date(disbursed_on, cutoff_day, payroll_day)
    rows = []
    for n in range(1, tenor + 1):
        amount = monthly if n < tenor else total_repayment - monthly * (tenor - 1)
        rows.append({
            "installment_number": n,
            "due_date": add_months(first_due, n - 1),
            "amount": amount,
        })
    return rows


def years_of_service(employee, today: Optional[date] = None) -> int:
    """
    From the permanent-employee date when known, otherwise from the hiring
    year/month encoded in the employee number (chars 2-3 = year, 4 = month).
    """
    today = today or timezone.localdate()
    hired = getattr(employee, "permanent_employee_date", None)
    if hired is None:
        number = getattr(employee, "employee_number", "") or ""
        if len(number) < 4 or not number[1:4].isdigit():
            return 0
        year = int("20" + number[1:3])
        month = max(1, int(number[3]))
        hired = date(year, month, 1)
    years = today.year - hired.year
    if (today.month, today.day) < (hired.month, hired.day):
        years -= 1
    return max(0, years)
