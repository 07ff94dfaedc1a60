# -*- coding: utf-8 -*-
from __future__ import annotations

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import status
from rest_framework.decorators import action

from kopkar.models import MemberApplication
from kopkar.selectors import member_application_selector as selector
from kopkar.serializers.member_serializer import (
    MemberApplicationDetailSerializer, MemberApplicationReadSerializer, MemberApplicationSubmitSerializer,
)
from kopkar.services import member_application_service
from kopkar.utils.permissions import HasRole
from kopkar.utils.roles import STAFF_ROLES
from .utils import WORKFLOW_FILTERS, ensure_owner_or_staff, extend_schema, extend_schema_view, path_int, std_errors, CONFLICT
from .workflow_view import WorkflowViewSet


@extend_schema_view(
    list=extend_schema(
        tags=["Member Application"],
        summary="Semua pendaftaran anggota (pengurus)",
        parameters=WORKFLOW_FILTERS,
        responses={200: MemberApplicationReadSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=["Member Application"],
        summary="Detail pendaftaran anggota",
        parameters=[path_int("id", "ID pendaftaran")],
        responses={200: MemberApplicationDetailSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=["Member Application"],
        summary="Daftar menjadi anggota koperasi",
        description="Pendaftaran langsung masuk tahap persetujuan pertama.",
        request=MemberApplicationSubmitSerializer,
        responses={201: MemberApplicationDetailSerializer, **std_errors(CONFLICT)},
    ),
    pending_approval=extend_schema(tags=["Member Application"]),
    approve=extend_schema(tags=["Member Application"], responses={200: MemberApplicationDetailSerializer, **std_errors()}),
    bulk_approve=extend_schema(tags=["Member Application"]),
)
class MemberApplicationViewSet(WorkflowViewSet):
    queryset = MemberApplication.objects.all()
    flow = member_application_service.MEMBER_FLOW
    read_serializer_class = MemberApplicationReadSerializer
    detail_serializer_class = MemberApplicationDetailSerializer
    sort_fields = ("created_at", "submitted_at", "status", "nik")
    action_permissions = {
        "list": [HasRole(*STAFF_ROLES)],
    }

    def pending_queryset(self, user, params):
        return selector.list_pending_for(user, params)

    def decide(self, obj_id, user, decision, notes):
        return member_application_service.process_approval(application_id=obj_id, user=user, decision=decision, notes=notes)

    def bulk_decide(self, ids, user, decision, notes):
        return member_application_service.bulk_process_approval(application_ids=ids, user=user, decision=decision, notes=notes)

    def list(self, request):
        return self.page(selector.filter_applications(request.query_params))

    def retrieve(self, request, pk=None):
        app = selector.get_application_by_id(int(pk))
        ensure_owner_or_staff(request.user, app)
        return self.detail_response(app)

    def create(self, request):
        ser = MemberApplicationSubmitSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        app = member_application_service.submit(user=request.user, data=ser.validated_data)
        return self.detail_response(app, status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Member Application"],
        summary="Pendaftaran saya (terbaru)",
        responses={200: MemberApplicationDetailSerializer, **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        app = selector.get_my_application(request.user.id)
        if app is None:
            raise ObjectDoesNotExist("Belum ada pendaftaran anggota")
        return self.detail_response(app)
