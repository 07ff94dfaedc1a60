# -*- coding: utf-8 -*-
"""Chuẩn hoá query params (string → list/int/bool/date) dùng chung cho các selector."""
from __future__ import annotations
from datetime import date
from typing import Any, List, Optional

from django.utils.dateparse import parse_date


def as_str_list(v: Any) -> List[str]:
    """'A,B' | ['A', 'B,C'] → ['A', 'B', 'C'] (upper-cased, blanks dropped)."""
    if v is None:
        return []
    items = v if isinstance(v, (list, tuple, set)) else [v]
    out: List[str] = []
    for x in items:
        if x is None:
            continue
        out.extend(s.strip().upper() for s in str(x).split(",") if s.strip())
    return out

def as_int(v: Any) -> Optional[int]:
    if v in (None, ""):
        return None
    s = str(v).strip()
    return int(s) if s.isdigit() else None

def as_bool(v: Any) -> Optional[bool]:
    if v in (None, ""):
        return None
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "on"}

def as_date(v: Any) -> Optional[date]:
    if not v:
        return None
    if isinstance(v, date):
        return v
    try:
        return parse_date(str(v))
    except ValueError:
        return None
