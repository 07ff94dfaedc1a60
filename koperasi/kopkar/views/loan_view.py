# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from kopkar.models import LoanApplication
from kopkar.selectors import loan_selector
from kopkar.serializers.common import BulkResultSerializer, CancelSerializer
from kopkar.serializers.loan_serializer import (
    AuthorizationSerializer, BulkAuthorizationSerializer, BulkDisbursementSerializer,
    DisbursementSerializer, LoanDetailSerializer, LoanInstallmentSerializer, LoanPreviewSerializer,
    LoanReadSerializer, LoanReviseSerializer, LoanUpdateSerializer, LoanWriteSerializer,
)
from kopkar.services import loan_service
from kopkar.utils.permissions import HasRole, IsVerifiedMember
from kopkar.utils.roles import DIVISI_SIMPAN_PINJAM, KETUA, SHOPKEEPER, STAFF_ROLES
from .utils import (
    OpenApiExample, WORKFLOW_FILTERS, ensure_owner_or_staff, extend_schema, extend_schema_view,
    path_int, q_str, std_errors,
)
from .workflow_view import WorkflowViewSet

LOAN_FILTERS = WORKFLOW_FILTERS + [q_str("loanType", "CASH_LOAN | GOODS_REIMBURSE | GOODS_ONLINE | GOODS_PHONE")]
MEMBER = [IsVerifiedMember]


@extend_schema_view(
    list=extend_schema(
        tags=["Loan"],
        summary="Semua pinjaman (pengurus)",
        parameters=LOAN_FILTERS,
        responses={200: LoanReadSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=["Loan"],
        summary="Detail pinjaman + riwayat persetujuan",
        parameters=[path_int("id", "ID pinjaman")],
        responses={200: LoanDetailSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=["Loan"],
        summary="Buat draft pinjaman",
        request=LoanWriteSerializer,
        responses={201: LoanDetailSerializer, **std_errors()},
        examples=[
            OpenApiExample(
                "Pinjaman tunai",
                value={"loan_type": "CASH_LOAN", "loan_amount": "5000000", "loan_tenor": 12,
                       "loan_purpose": "Renovasi rumah"},
                request_only=True,
            ),
            OpenApiExample(
                "Pinjaman barang online",
                value={"loan_type": "GOODS_ONLINE", "item_name": "Laptop", "item_price": "8000000",
                       "item_url": "https://example.com/laptop", "loan_tenor": 10},
                request_only=True,
            ),
        ],
    ),
    partial_update=extend_schema(
        tags=["Loan"],
        summary="Ubah draft pinjaman",
        parameters=[path_int("id", "ID pinjaman")],
        request=LoanUpdateSerializer,
        responses={200: LoanDetailSerializer, **std_errors()},
    ),
    destroy=extend_schema(
        tags=["Loan"],
        summary="Hapus draft pinjaman",
        parameters=[path_int("id", "ID pinjaman")],
        responses={204: None, **std_errors()},
    ),
    pending_approval=extend_schema(tags=["Loan"]),
    approve=extend_schema(tags=["Loan"], responses={200: LoanDetailSerializer, **std_errors()}),
    bulk_approve=extend_schema(tags=["Loan"]),
)
class LoanViewSet(WorkflowViewSet):
    queryset = LoanApplication.objects.all()
    flow = loan_service.LOAN_FLOW
    read_serializer_class = LoanReadSerializer
    detail_serializer_class = LoanDetailSerializer
    sort_fields = ("created_at", "submitted_at", "loan_amount", "loan_tenor", "loan_number", "status")
    sort_aliases = {"amount": "loan_amount", "tenor": "loan_tenor"}
    action_permissions = {
        "list": [HasRole(*STAFF_ROLES, SHOPKEEPER)],
        "my": MEMBER,
        "create": MEMBER,
        "partial_update": MEMBER,
        "destroy": MEMBER,
        "submit": MEMBER,
        "cancel": MEMBER,
        "eligibility": MEMBER,
        "preview": MEMBER,
        "revise": [HasRole(DIVISI_SIMPAN_PINJAM)],
        "pending_disbursement": [HasRole(SHOPKEEPER)],
        "disburse": [HasRole(SHOPKEEPER)],
        "bulk_disburse": [HasRole(SHOPKEEPER)],
        "pending_authorization": [HasRole(KETUA)],
        "authorize": [HasRole(KETUA)],
        "bulk_authorize": [HasRole(KETUA)],
    }

    # ---- workflow hooks
    def pending_queryset(self, user, params):
        return loan_selector.list_pending_for(user, params)

    def decide(self, obj_id, user, decision, notes):
        return loan_service.process_approval(loan_id=obj_id, user=user, decision=decision, notes=notes)

    def bulk_decide(self, ids, user, decision, notes):
        return loan_service.bulk_process_approval(loan_ids=ids, user=user, decision=decision, notes=notes)

    # ---- CRUD
    def list(self, request):
        return self.page(loan_selector.filter_loans(request.query_params))

    def retrieve(self, request, pk=None):
        loan = loan_selector.get_loan_by_id(int(pk))
        ensure_owner_or_staff(request.user, loan, extra_roles=(SHOPKEEPER,))
        return self.detail_response(loan)

    def create(self, request):
        ser = LoanWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        loan = loan_service.create_draft(user=request.user, data=ser.validated_data)
        return self.detail_response(loan, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = LoanUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        loan = loan_service.update_draft(loan_id=int(pk), user=request.user, data=ser.validated_data)
        return self.detail_response(loan)

    def destroy(self, request, pk=None):
        loan_service.delete_draft(loan_id=int(pk), user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ---- member actions
    @extend_schema(
        tags=["Loan"],
        summary="Pinjaman saya",
        parameters=LOAN_FILTERS,
        responses={200: LoanReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        return self.page(loan_selector.list_my_loans(request.user, request.query_params))

    @extend_schema(
        tags=["Loan"],
        summary="Cek kelayakan & plafon pinjaman",
        parameters=[q_str("loanType", "Jenis pinjaman", required=True)],
        responses={200: None, **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def eligibility(self, request):
        loan_type = (request.query_params.get("loanType") or request.query_params.get("loan_type") or "CASH_LOAN").upper()
        return Response(loan_service.get_eligibility(request.user, loan_type))

    @extend_schema(
        tags=["Loan"],
        summary="Simulasi angsuran",
        request=LoanPreviewSerializer,
        responses={200: None, **std_errors()},
    )
    @action(detail=False, methods=["post"])
    def preview(self, request):
        ser = LoanPreviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        return Response(loan_service.preview(request.user, v["loan_type"], v["loan_amount"], v["loan_tenor"]))

    @extend_schema(
        tags=["Loan"],
        summary="Ajukan draft pinjaman",
        parameters=[path_int("id", "ID pinjaman")],
        request=None,
        responses={200: LoanDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        return self.detail_response(loan_service.submit(loan_id=int(pk), user=request.user))

    @extend_schema(
        tags=["Loan"],
        summary="Batalkan pinjaman (draft / dalam review)",
        parameters=[path_int("id", "ID pinjaman")],
        request=CancelSerializer,
        responses={200: LoanDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        loan = loan_service.cancel(loan_id=int(pk), user=request.user, reason=ser.validated_data["reason"])
        return self.detail_response(loan)

    @extend_schema(
        tags=["Loan"],
        summary="Jadwal angsuran",
        parameters=[path_int("id", "ID pinjaman")],
        responses={200: LoanInstallmentSerializer(many=True), **std_errors()},
    )
    @action(detail=True, methods=["get"])
    def installments(self, request, pk=None):
        loan = loan_selector.get_loan_by_id(int(pk))
        ensure_owner_or_staff(request.user, loan)
        return Response(LoanInstallmentSerializer(loan_selector.list_installments(loan.id), many=True).data)

    # ---- DSP revision
    @extend_schema(
        tags=["Loan"],
        summary="Revisi pinjaman pada tahap Divisi Simpan Pinjam",
        parameters=[path_int("id", "ID pinjaman")],
        request=LoanReviseSerializer,
        responses={200: LoanDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def revise(self, request, pk=None):
        ser = LoanReviseSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        loan = loan_service.revise(loan_id=int(pk), user=request.user, data=ser.validated_data)
        return self.detail_response(loan)

    # ---- disbursement (shopkeeper)
    @extend_schema(
        tags=["Loan"],
        summary="Pinjaman menunggu pencairan",
        parameters=LOAN_FILTERS,
        responses={200: LoanReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="pending-disbursement")
    def pending_disbursement(self, request):
        return self.page(loan_selector.list_by_status(LoanApplication.Status.APPROVED_PENDING_DISBURSEMENT, request.query_params))

    @extend_schema(
        tags=["Loan"],
        summary="Proses pencairan",
        parameters=[path_int("id", "ID pinjaman")],
        request=DisbursementSerializer,
        responses={200: LoanDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def disburse(self, request, pk=None):
        ser = DisbursementSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        loan = loan_service.disburse(loan_id=int(pk), user=request.user, **ser.validated_data)
        return self.detail_response(loan)

    @extend_schema(
        tags=["Loan"],
        summary="Proses pencairan banyak pinjaman",
        request=BulkDisbursementSerializer,
        responses={200: BulkResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="bulk-disburse")
    def bulk_disburse(self, request):
        ser = BulkDisbursementSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = dict(ser.validated_data)
        results = loan_service.bulk_disburse(loan_ids=v.pop("ids"), user=request.user, **v)
        return self.bulk_response("Proses pencairan selesai", results)

    # ---- authorization (ketua)
    @extend_schema(
        tags=["Loan"],
        summary="Pinjaman menunggu otorisasi",
        parameters=LOAN_FILTERS,
        responses={200: LoanReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="pending-authorization")
    def pending_authorization(self, request):
        return self.page(loan_selector.list_by_status(LoanApplication.Status.PENDING_AUTHORIZATION, request.query_params))

    @extend_schema(
        tags=["Loan"],
        summary="Otorisasi pencairan (jadwal angsuran dibuat)",
        parameters=[path_int("id", "ID pinjaman")],
        request=AuthorizationSerializer,
        responses={200: LoanDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def authorize(self, request, pk=None):
        ser = AuthorizationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        loan = loan_service.authorize(loan_id=int(pk), user=request.user, **ser.validated_data)
        return self.detail_response(loan)

    @extend_schema(
        tags=["Loan"],
        summary="Otorisasi banyak pinjaman",
        request=BulkAuthorizationSerializer,
        responses={200: BulkResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="bulk-authorize")
    def bulk_authorize(self, request):
        ser = BulkAuthorizationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = dict(ser.validated_data)
        results = loan_service.bulk_authorize(loan_ids=v.pop("ids"), user=request.user, **v)
        return self.bulk_response("Proses otorisasi selesai", results)
