# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.models import LoanRepayment
from kopkar.selectors import repayment_selector as selector
from kopkar.selectors.common import as_int
from kopkar.serializers.common import CancelSerializer
from kopkar.serializers.repayment_serializer import (
    LoanRepaymentCreateSerializer, LoanRepaymentDetailSerializer, LoanRepaymentReadSerializer,
    RepaymentCalculationSerializer,
)
from kopkar.services import repayment_service
from kopkar.utils.permissions import HasRole, IsVerifiedMember
from kopkar.utils.roles import STAFF_ROLES
from .utils import (
    WORKFLOW_FILTERS, ensure_owner_or_staff, extend_schema, extend_schema_view, path_int, q_int, std_errors,
)
from .workflow_view import WorkflowViewSet

MEMBER = [IsVerifiedMember]


@extend_schema_view(
    list=extend_schema(
        tags=["Loan Repayment"],
        summary="Semua pelunasan (pengurus)",
        parameters=WORKFLOW_FILTERS + [q_int("loanId", "Filter per pinjaman")],
        responses={200: LoanRepaymentReadSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=["Loan Repayment"],
        summary="Detail pelunasan",
        parameters=[path_int("id", "ID pelunasan")],
        responses={200: LoanRepaymentDetailSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=["Loan Repayment"],
        summary="Ajukan pelunasan dipercepat",
        request=LoanRepaymentCreateSerializer,
        responses={201: LoanRepaymentDetailSerializer, **std_errors()},
    ),
    pending_approval=extend_schema(tags=["Loan Repayment"]),
    approve=extend_schema(tags=["Loan Repayment"], responses={200: LoanRepaymentDetailSerializer, **std_errors()}),
    bulk_approve=extend_schema(tags=["Loan Repayment"]),
)
class LoanRepaymentViewSet(WorkflowViewSet):
    queryset = LoanRepayment.objects.all()
    flow = repayment_service.REPAYMENT_FLOW
    read_serializer_class = LoanRepaymentReadSerializer
    detail_serializer_class = LoanRepaymentDetailSerializer
    sort_fields = ("created_at", "submitted_at", "total_amount", "repayment_number", "status")
    sort_aliases = {"amount": "total_amount"}
    action_permissions = {
        "list": [HasRole(*STAFF_ROLES)],
        "my": MEMBER,
        "create": MEMBER,
        "calculate": MEMBER,
        "cancel": MEMBER,
    }

    def pending_queryset(self, user, params):
        return selector.list_pending_for(user, params)

    def decide(self, obj_id, user, decision, notes):
        return repayment_service.process_approval(repayment_id=obj_id, user=user, decision=decision, notes=notes)

    def bulk_decide(self, ids, user, decision, notes):
        return repayment_service.bulk_process_approval(repayment_ids=ids, user=user, decision=decision, notes=notes)

    def list(self, request):
        return self.page(selector.filter_repayments(request.query_params))

    def retrieve(self, request, pk=None):
        repayment = selector.get_repayment_by_id(int(pk))
        ensure_owner_or_staff(request.user, repayment)
        return self.detail_response(repayment)

    def create(self, request):
        ser = LoanRepaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        repayment = repayment_service.create(user=request.user, **ser.validated_data)
        return self.detail_response(repayment, status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Loan Repayment"],
        summary="Pelunasan saya",
        parameters=WORKFLOW_FILTERS,
        responses={200: LoanRepaymentReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        return self.page(selector.list_my_repayments(request.user, request.query_params))

    @extend_schema(
        tags=["Loan Repayment"],
        summary="Hitung sisa pelunasan",
        parameters=[q_int("loanId", "Loan ID", required=True)],
        responses={200: RepaymentCalculationSerializer, **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def calculate(self, request):
        loan_id = as_int(request.query_params.get("loanId") or request.query_params.get("loan_id"))
        if not loan_id:
            return Response({"detail": "loanId wajib diisi"}, status=status.HTTP_400_BAD_REQUEST)
        data = repayment_service.calculate(loan_id=loan_id, user=request.user)
        return Response(RepaymentCalculationSerializer(data).data)

    @extend_schema(
        tags=["Loan Repayment"],
        summary="Batalkan pelunasan yang masih direview",
        parameters=[path_int("id", "ID pelunasan")],
        request=CancelSerializer,
        responses={200: LoanRepaymentDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        repayment = repayment_service.cancel(repayment_id=int(pk), user=request.user, reason=ser.validated_data["reason"])
        return self.detail_response(repayment)
