# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.models import DepositChangeRequest
from kopkar.selectors import deposit_request_selector as selector
from kopkar.serializers.common import CancelSerializer
from kopkar.serializers.deposit_serializer import (
    DepositChangeDetailSerializer, DepositChangeReadSerializer, DepositChangeUpdateSerializer,
    DepositChangeWriteSerializer,
)
from kopkar.services import deposit_change_service as service
from kopkar.utils.permissions import HasRole, IsVerifiedMember
from kopkar.utils.roles import STAFF_ROLES
from .utils import WORKFLOW_FILTERS, ensure_owner_or_staff, extend_schema, extend_schema_view, path_int, std_errors
from .workflow_view import WorkflowViewSet

MEMBER = [IsVerifiedMember]
TAG = "Deposit Change"


@extend_schema_view(
    list=extend_schema(
        tags=[TAG],
        summary="Semua pengajuan perubahan deposito (pengurus)",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositChangeReadSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=[TAG],
        summary="Detail perubahan deposito beserta perbandingan",
        parameters=[path_int("id", "ID perubahan")],
        responses={200: DepositChangeDetailSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=[TAG],
        summary="Buat draft perubahan setoran / tenor deposito",
        description="Minimal salah satu dari `new_amount_code` atau `new_tenor_code` harus berbeda dari nilai saat ini.",
        request=DepositChangeWriteSerializer,
        responses={201: DepositChangeDetailSerializer, **std_errors()},
    ),
    partial_update=extend_schema(
        tags=[TAG],
        summary="Ubah draft perubahan deposito",
        parameters=[path_int("id", "ID perubahan")],
        request=DepositChangeUpdateSerializer,
        responses={200: DepositChangeDetailSerializer, **std_errors()},
    ),
    destroy=extend_schema(
        tags=[TAG],
        summary="Hapus draft perubahan deposito",
        parameters=[path_int("id", "ID perubahan")],
        responses={204: None, **std_errors()},
    ),
    pending_approval=extend_schema(tags=[TAG]),
    approve=extend_schema(tags=[TAG], responses={200: DepositChangeDetailSerializer, **std_errors()}),
    bulk_approve=extend_schema(tags=[TAG]),
)
class DepositChangeViewSet(WorkflowViewSet):
    queryset = DepositChangeRequest.objects.all()
    flow = service.DEPOSIT_CHANGE_FLOW
    read_serializer_class = DepositChangeReadSerializer
    detail_serializer_class = DepositChangeDetailSerializer
    sort_fields = ("created_at", "submitted_at", "change_number", "status")
    action_permissions = {
        "list": [HasRole(*STAFF_ROLES)],
        "my": MEMBER,
        "create": MEMBER,
        "partial_update": MEMBER,
        "destroy": MEMBER,
        "submit": MEMBER,
        "cancel": MEMBER,
    }

    def pending_queryset(self, user, params):
        return selector.list_pending_changes(user, params)

    def decide(self, obj_id, user, decision, notes):
        return service.process_approval(change_id=obj_id, user=user, decision=decision, notes=notes)

    def bulk_decide(self, ids, user, decision, notes):
        return service.bulk_process_approval(change_ids=ids, user=user, decision=decision, notes=notes)

    def list(self, request):
        return self.page(selector.filter_changes(request.query_params))

    def retrieve(self, request, pk=None):
        change = selector.get_change_by_id(int(pk))
        ensure_owner_or_staff(request.user, change)
        return self.detail_response(change)

    def create(self, request):
        ser = DepositChangeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        change = service.create_draft(user=request.user, data=ser.validated_data)
        return self.detail_response(change, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = DepositChangeUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        change = service.update_draft(change_id=int(pk), user=request.user, data=ser.validated_data)
        return self.detail_response(change)

    def destroy(self, request, pk=None):
        service.delete_draft(change_id=int(pk), user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=[TAG],
        summary="Pengajuan perubahan deposito saya",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositChangeReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        return self.page(selector.list_my_changes(request.user, request.query_params))

    @extend_schema(
        tags=[TAG],
        summary="Ajukan draft perubahan deposito",
        parameters=[path_int("id", "ID perubahan")],
        request=None,
        responses={200: DepositChangeDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        return self.detail_response(service.submit(change_id=int(pk), user=request.user))

    @extend_schema(
        tags=[TAG],
        summary="Batalkan perubahan deposito yang masih direview",
        parameters=[path_int("id", "ID perubahan")],
        request=CancelSerializer,
        responses={200: DepositChangeDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        change = service.cancel(change_id=int(pk), user=request.user, reason=ser.validated_data["reason"])
        return self.detail_response(change)
