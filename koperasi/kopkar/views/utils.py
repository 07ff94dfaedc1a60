# views/utils.py
"""
Shared tooling for drf-spectacular docs and the approval-workflow endpoints.
Usage in your views:
    from .utils import (
        extend_schema, extend_schema_view,
        OpenApiParameter, OpenApiExample, OpenApiResponse,
        OpenApiTypes, inline_serializer,
        ErrorSerializer, path_int, q_int, q_str, q_date,
        PAGE_PARAMS, WORKFLOW_FILTERS, std_errors, paginate, trail_context, csv_response,
        AdminAPIView, not_found,
    )
"""
import csv
from typing import Any, Dict, Optional

from django.core.exceptions import PermissionDenied
from django.http import HttpResponse
from drf_spectacular.utils import (
    extend_schema, extend_schema_view,
    OpenApiParameter, OpenApiExample, OpenApiResponse, inline_serializer,
)
from drf_spectacular.types import OpenApiTypes
from rest_framework import serializers, status
from rest_framework.permissions import SAFE_METHODS
from rest_framework.response import Response
from rest_framework.views import APIView

from kopkar.services import approval_service, audit_service
from kopkar.utils.auth import CookieJWTAuthentication
from kopkar.utils.pagination import DefaultPagination, apply_sorting
from kopkar.utils.permissions import HasRole, IsAuthenticatedUser
from kopkar.utils.roles import ADMIN_ROLES, STAFF_ROLES

# ---- Reusable error schema
ErrorSerializer = inline_serializer(
    name="Error",
    fields={"detail": serializers.CharField()}
)

# ---- Param helpers

def path_int(name: str, description: str):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.PATH, description=description)

def q_int(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.QUERY, required=required, description=description)

def q_str(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.STR, OpenApiParameter.QUERY, required=required, description=description)

def q_date(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.DATE, OpenApiParameter.QUERY, required=required, description=description)

# ---- OpenAPI common params for pagination
PAGE_PARAMS = [
    q_int("page", "Halaman (default 1)"),
    q_int("limit", "Jumlah per halaman (default 10, maks 100)"),
    q_str("sortBy", "Kolom pengurutan (default createdAt)"),
    q_str("sortOrder", "asc | desc (default desc)"),
]

WORKFLOW_FILTERS = PAGE_PARAMS + [
    q_str("status", "Filter status (boleh dipisah koma)"),
    q_str("step", "Filter current_step (DIVISI_SIMPAN_PINJAM, KETUA, PENGAWAS)"),
    q_str("search", "Cari nomor / nama"),
]

# ---- Convenience for common responses

def std_errors(extra: dict | None = None):
    """Standard error response mapping you can merge into responses=..."""
    errs = {
        400: OpenApiResponse(ErrorSerializer, description="Bad Request"),
        401: OpenApiResponse(ErrorSerializer, description="Unauthorized"),
        403: OpenApiResponse(ErrorSerializer, description="Forbidden"),
        404: OpenApiResponse(ErrorSerializer, description="Not Found"),
    }
    if extra:
        errs.update(extra)
    return errs

CONFLICT = {409: OpenApiResponse(ErrorSerializer, description="Conflict")}


def paginate(view, qs, serializer_cls, allowed_sort=("created_at",), aliases: Optional[Dict[str, str]] = None, context=None):
    """Sort by ?sortBy/?sortOrder, paginate and wrap in the {data, meta} envelope."""
    qs = apply_sorting(qs, view.request.query_params, allowed_sort, aliases=aliases)
    page = view.paginate_queryset(qs)
    data = serializer_cls(page, many=True, context=context or {}).data
    return view.get_paginated_response(data)


def trail_context(flow, obj) -> Dict[str, Any]:
    return {
        "approvals": approval_service.approvals_for(flow, obj),
        "history": audit_service.history(flow.object_type, obj.pk),
    }


def ensure_owner_or_staff(user, obj, extra_roles=()) -> None:
    if obj.user_id != user.id and not user.has_role(*STAFF_ROLES, *extra_roles):
        raise PermissionDenied("Anda tidak memiliki akses ke data ini")


def csv_response(rows, filename: str) -> HttpResponse:
    """Xuất CSV; `rows` bắt đầu bằng dòng header."""
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    writer = csv.writer(response)
    for row in rows:
        writer.writerow(row)
    return response


# Admin master data: ghi cần ketua / divisi simpan pinjam; `read_open` mở GET cho mọi user đã login.
class AdminAPIView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    pagination_class = DefaultPagination
    read_open = False

    def get_permissions(self):
        if self.read_open and self.request.method in SAFE_METHODS:
            return [IsAuthenticatedUser()]
        return [HasRole(*ADMIN_ROLES)()]

    def paginate_queryset(self, qs):
        self.paginator = self.pagination_class()
        return self.paginator.paginate_queryset(qs, self.request, view=self)

    def get_paginated_response(self, data):
        return self.paginator.get_paginated_response(data)


def not_found(label: str) -> Response:
    return Response({"detail": f"{label} tidak ditemukan"}, status=status.HTTP_404_NOT_FOUND)
