# -*- coding: utf-8 -*-
"""
Pagination + sorting shared by list endpoints.

Query: ?page=1&limit=10&sortBy=createdAt&sortOrder=desc
Body:  {"data": [...], "meta": {"total", "page", "limit", "totalPages"}}
"""
import math
import re
from typing import Dict, Iterable, Optional

from django.db.models import QuerySet
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 10                # mặc định
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return Response({
            "data": data,
            "meta": {
                "total": total,
                "page": self.page.number,
                "limit": limit,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "data": schema,
                "meta": {
                    "type": "object",
                    "properties": {
                        "total": {"type": "integer"},
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                    },
                },
            },
        }


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def apply_sorting(
    qs: QuerySet,
    params,
    allowed: Iterable[str],
    default: str = "created_at",
    aliases: Optional[Dict[str, str]] = None,
) -> QuerySet:
    """
    Order `qs` by ?sortBy (camelCase or snake_case) and ?sortOrder (asc|desc).
    Unknown fields fall back to `default`; the order defaults to desc.
    """
    field = _snake((params.get("sortBy") or params.get("sort_by") or "").strip())
    if aliases and field in aliases:
        field = aliases[field]
    if field not in set(allowed):
        field = default
    order = (params.get("sortOrder") or params.get("sort_order") or "desc").strip().lower()
    prefix = "" if order == "asc" else "-"
    return qs.order_by(f"{prefix}{field}", f"{prefix}id")
