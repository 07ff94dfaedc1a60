# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.models import DepositWithdrawal
from kopkar.selectors import deposit_request_selector as selector
from kopkar.serializers.common import BulkIdsSerializer, BulkResultSerializer, CancelSerializer, NotesSerializer
from kopkar.serializers.deposit_serializer import (
    DepositWithdrawalCalculationSerializer, DepositWithdrawalCreateSerializer,
    DepositWithdrawalDetailSerializer, DepositWithdrawalReadSerializer,
)
from kopkar.services import deposit_withdrawal_service as service
from kopkar.utils.permissions import HasRole, IsVerifiedMember
from kopkar.utils.roles import KETUA, SHOPKEEPER, STAFF_ROLES
from .utils import WORKFLOW_FILTERS, ensure_owner_or_staff, extend_schema, extend_schema_view, path_int, std_errors
from .workflow_view import WorkflowViewSet

MEMBER = [IsVerifiedMember]
S = DepositWithdrawal.Status
TAG = "Deposit Withdrawal"


@extend_schema_view(
    list=extend_schema(
        tags=[TAG],
        summary="Semua penarikan deposito (pengurus)",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositWithdrawalReadSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=[TAG],
        summary="Detail penarikan deposito",
        parameters=[path_int("id", "ID penarikan")],
        responses={200: DepositWithdrawalDetailSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=[TAG],
        summary="Ajukan penarikan dana deposito",
        description="Langsung berstatus SUBMITTED. Penalti berlaku bila ditarik sebelum jatuh tempo.",
        request=DepositWithdrawalCreateSerializer,
        responses={201: DepositWithdrawalDetailSerializer, **std_errors()},
    ),
    pending_approval=extend_schema(tags=[TAG]),
    approve=extend_schema(tags=[TAG], responses={200: DepositWithdrawalDetailSerializer, **std_errors()}),
    bulk_approve=extend_schema(tags=[TAG]),
)
class DepositWithdrawalViewSet(WorkflowViewSet):
    queryset = DepositWithdrawal.objects.all()
    flow = service.DEPOSIT_WITHDRAWAL_FLOW
    read_serializer_class = DepositWithdrawalReadSerializer
    detail_serializer_class = DepositWithdrawalDetailSerializer
    sort_fields = ("created_at", "submitted_at", "withdrawal_amount", "withdrawal_number", "status")
    sort_aliases = {"amount": "withdrawal_amount"}
    action_permissions = {
        "list": [HasRole(*STAFF_ROLES, SHOPKEEPER)],
        "my": MEMBER,
        "create": MEMBER,
        "calculate": MEMBER,
        "cancel": MEMBER,
        "pending_disbursement": [HasRole(SHOPKEEPER)],
        "confirm_disbursement": [HasRole(SHOPKEEPER)],
        "bulk_confirm_disbursement": [HasRole(SHOPKEEPER)],
        "pending_authorization": [HasRole(KETUA)],
        "confirm_authorization": [HasRole(KETUA)],
        "bulk_confirm_authorization": [HasRole(KETUA)],
    }

    def pending_queryset(self, user, params):
        return selector.list_pending_withdrawals(user, params)

    def decide(self, obj_id, user, decision, notes):
        return service.process_approval(withdrawal_id=obj_id, user=user, decision=decision, notes=notes)

    def bulk_decide(self, ids, user, decision, notes):
        return service.bulk_process_approval(withdrawal_ids=ids, user=user, decision=decision, notes=notes)

    def list(self, request):
        return self.page(selector.filter_withdrawals(request.query_params))

    def retrieve(self, request, pk=None):
        w = selector.get_withdrawal_by_id(int(pk))
        ensure_owner_or_staff(request.user, w, extra_roles=(SHOPKEEPER,))
        return self.detail_response(w)

    def create(self, request):
        ser = DepositWithdrawalCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        w = service.create(
            user=request.user, deposit_id=v["deposit_id"], amount=v["withdrawal_amount"],
            bank_account_number=v["bank_account_number"], reason=v["reason"],
        )
        return self.detail_response(w, status.HTTP_201_CREATED)

    @extend_schema(
        tags=[TAG],
        summary="Penarikan deposito saya",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositWithdrawalReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        return self.page(selector.list_my_withdrawals(request.user, request.query_params))

    @extend_schema(
        tags=[TAG],
        summary="Hitung penalti & jumlah bersih penarikan deposito",
        request=DepositWithdrawalCalculationSerializer,
        responses={200: None, **std_errors()},
    )
    @action(detail=False, methods=["post"])
    def calculate(self, request):
        ser = DepositWithdrawalCalculationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        return Response(service.preview(deposit_id=v["deposit_id"], user=request.user, amount=v["withdrawal_amount"]))

    @extend_schema(
        tags=[TAG],
        summary="Batalkan penarikan deposito yang masih direview",
        parameters=[path_int("id", "ID penarikan")],
        request=CancelSerializer,
        responses={200: DepositWithdrawalDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        w = service.cancel(withdrawal_id=int(pk), user=request.user, reason=ser.validated_data["reason"])
        return self.detail_response(w)

    # ---- disbursement (shopkeeper) → authorization (ketua)
    @extend_schema(
        tags=[TAG],
        summary="Penarikan deposito menunggu pencairan",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositWithdrawalReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="pending-disbursement")
    def pending_disbursement(self, request):
        return self.page(selector.withdrawals_by_status(S.APPROVED_WAITING_DISBURSEMENT, request.query_params))

    @extend_schema(
        tags=[TAG],
        summary="Konfirmasi pencairan",
        parameters=[path_int("id", "ID penarikan")],
        request=NotesSerializer,
        responses={200: DepositWithdrawalDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"], url_path="confirm-disbursement")
    def confirm_disbursement(self, request, pk=None):
        ser = NotesSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        w = service.confirm_disbursement(withdrawal_id=int(pk), user=request.user, notes=ser.validated_data["notes"])
        return self.detail_response(w)

    @extend_schema(
        tags=[TAG],
        summary="Konfirmasi pencairan banyak penarikan deposito",
        request=BulkIdsSerializer,
        responses={200: BulkResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="bulk-confirm-disbursement")
    def bulk_confirm_disbursement(self, request):
        ser = BulkIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        results = service.bulk_confirm_disbursement(
            withdrawal_ids=ser.validated_data["ids"], user=request.user, notes=ser.validated_data["notes"],
        )
        return self.bulk_response("Konfirmasi pencairan selesai", results)

    @extend_schema(
        tags=[TAG],
        summary="Penarikan deposito menunggu otorisasi",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositWithdrawalReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="pending-authorization")
    def pending_authorization(self, request):
        return self.page(selector.withdrawals_by_status(S.DISBURSEMENT_IN_PROGRESS, request.query_params))

    @extend_schema(
        tags=[TAG],
        summary="Otorisasi penarikan deposito (saldo dan dana deposito dipotong)",
        parameters=[path_int("id", "ID penarikan")],
        request=NotesSerializer,
        responses={200: DepositWithdrawalDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"], url_path="confirm-authorization")
    def confirm_authorization(self, request, pk=None):
        ser = NotesSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        w = service.confirm_authorization(withdrawal_id=int(pk), user=request.user, notes=ser.validated_data["notes"])
        return self.detail_response(w)

    @extend_schema(
        tags=[TAG],
        summary="Otorisasi banyak penarikan deposito",
        request=BulkIdsSerializer,
        responses={200: BulkResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="bulk-confirm-authorization")
    def bulk_confirm_authorization(self, request):
        ser = BulkIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        results = service.bulk_confirm_authorization(
            withdrawal_ids=ser.validated_data["ids"], user=request.user, notes=ser.validated_data["notes"],
        )
        return self.bulk_response("Otorisasi penarikan selesai", results)
