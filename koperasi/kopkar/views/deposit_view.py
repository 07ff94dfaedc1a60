# -*- coding: utf-8 -*-
from __future__ import annotations

from django.core.exceptions import ValidationError
from rest_framework import status, serializers
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from kopkar.models import DepositApplication
from kopkar.selectors import deposit_selector
from kopkar.selectors.common import as_bool
from kopkar.serializers.common import CancelSerializer
from kopkar.serializers.deposit_serializer import (
    DepositAmountOptionSerializer, DepositCalculationSerializer, DepositDetailSerializer,
    DepositReadSerializer, DepositTenorOptionSerializer, DepositUpdateSerializer, DepositWriteSerializer,
)
from kopkar.services import deposit_option_service, deposit_service
from kopkar.utils.auth import CookieJWTAuthentication
from kopkar.utils.permissions import HasRole, IsAuthenticatedUser, IsVerifiedMember
from kopkar.utils.roles import ADMIN_ROLES, STAFF_ROLES
from .utils import (
    WORKFLOW_FILTERS, ensure_owner_or_staff, extend_schema, extend_schema_view,
    inline_serializer, path_int, q_str, std_errors,
)
from .workflow_view import WorkflowViewSet

MEMBER = [IsVerifiedMember]


@extend_schema_view(
    list=extend_schema(
        tags=["Deposit"],
        summary="Semua deposito (pengurus)",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositReadSerializer(many=True), **std_errors()},
    ),
    retrieve=extend_schema(
        tags=["Deposit"],
        summary="Detail deposito",
        parameters=[path_int("id", "ID deposito")],
        responses={200: DepositDetailSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=["Deposit"],
        summary="Buat draft deposito",
        request=DepositWriteSerializer,
        responses={201: DepositDetailSerializer, **std_errors()},
    ),
    partial_update=extend_schema(
        tags=["Deposit"],
        summary="Ubah draft deposito",
        parameters=[path_int("id", "ID deposito")],
        request=DepositUpdateSerializer,
        responses={200: DepositDetailSerializer, **std_errors()},
    ),
    destroy=extend_schema(
        tags=["Deposit"],
        summary="Hapus draft deposito",
        parameters=[path_int("id", "ID deposito")],
        responses={204: None, **std_errors()},
    ),
    pending_approval=extend_schema(tags=["Deposit"]),
    approve=extend_schema(tags=["Deposit"], responses={200: DepositDetailSerializer, **std_errors()}),
    bulk_approve=extend_schema(tags=["Deposit"]),
)
class DepositViewSet(WorkflowViewSet):
    queryset = DepositApplication.objects.all()
    flow = deposit_service.DEPOSIT_FLOW
    read_serializer_class = DepositReadSerializer
    detail_serializer_class = DepositDetailSerializer
    sort_fields = ("created_at", "submitted_at", "amount_value", "tenor_months", "deposit_number", "status")
    sort_aliases = {"amount": "amount_value", "tenor": "tenor_months"}
    action_permissions = {
        "list": [HasRole(*STAFF_ROLES)],
        "my": MEMBER,
        "create": MEMBER,
        "partial_update": MEMBER,
        "destroy": MEMBER,
        "submit": MEMBER,
        "cancel": MEMBER,
        "calculate": MEMBER,
    }

    def pending_queryset(self, user, params):
        return deposit_selector.list_pending_for(user, params)

    def decide(self, obj_id, user, decision, notes):
        return deposit_service.process_approval(deposit_id=obj_id, user=user, decision=decision, notes=notes)

    def bulk_decide(self, ids, user, decision, notes):
        return deposit_service.bulk_process_approval(deposit_ids=ids, user=user, decision=decision, notes=notes)

    def list(self, request):
        return self.page(deposit_selector.filter_deposits(request.query_params))

    def retrieve(self, request, pk=None):
        deposit = deposit_selector.get_deposit_by_id(int(pk))
        ensure_owner_or_staff(request.user, deposit)
        return self.detail_response(deposit)

    def create(self, request):
        ser = DepositWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        deposit = deposit_service.create_draft(user=request.user, data=ser.validated_data)
        return self.detail_response(deposit, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = DepositUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        deposit = deposit_service.update_draft(deposit_id=int(pk), user=request.user, data=ser.validated_data)
        return self.detail_response(deposit)

    def destroy(self, request, pk=None):
        deposit_service.delete_draft(deposit_id=int(pk), user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Deposit"],
        summary="Deposito saya",
        parameters=WORKFLOW_FILTERS,
        responses={200: DepositReadSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        return self.page(deposit_selector.list_my_deposits(request.user, request.query_params))

    @extend_schema(
        tags=["Deposit"],
        summary="Simulasi imbal hasil deposito",
        request=DepositCalculationSerializer,
        responses={200: None, **std_errors()},
    )
    @action(detail=False, methods=["post"])
    def calculate(self, request):
        ser = DepositCalculationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return Response(deposit_service.preview(**ser.validated_data))

    @extend_schema(
        tags=["Deposit"],
        summary="Ajukan draft deposito",
        parameters=[path_int("id", "ID deposito")],
        request=None,
        responses={200: DepositDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        return self.detail_response(deposit_service.submit(deposit_id=int(pk), user=request.user))

    @extend_schema(
        tags=["Deposit"],
        summary="Batalkan deposito",
        parameters=[path_int("id", "ID deposito")],
        request=CancelSerializer,
        responses={200: DepositDetailSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        deposit = deposit_service.cancel(deposit_id=int(pk), user=request.user, reason=ser.validated_data["reason"])
        return self.detail_response(deposit)


# ====== Options (amount / tenor) ======
OPTION_SERIALIZERS = {"amount": DepositAmountOptionSerializer, "tenor": DepositTenorOptionSerializer}
DepositConfigSerializer = inline_serializer(
    name="DepositConfig",
    fields={
        "amounts": DepositAmountOptionSerializer(many=True),
        "tenors": DepositTenorOptionSerializer(many=True),
        "interest_rate": serializers.DecimalField(max_digits=5, decimal_places=2),
        "calculation_method": serializers.CharField(),
    },
)


class _OptionMixin:
    authentication_classes = [CookieJWTAuthentication]

    def get_permissions(self):
        if self.request.method == "GET":
            return [IsAuthenticatedUser()]
        return [HasRole(*ADMIN_ROLES)()]

    def serializer_for(self, kind: str):
        try:
            return OPTION_SERIALIZERS[kind]
        except KeyError:
            raise ValidationError("Jenis opsi harus 'amount' atau 'tenor'")


class DepositConfigView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticatedUser]

    @extend_schema(
        tags=["Deposit Options"],
        summary="Opsi aktif + suku bunga & metode perhitungan",
        responses={200: DepositConfigSerializer, **std_errors()},
    )
    def get(self, request):
        cfg = deposit_option_service.config()
        return Response({
            "amounts": DepositAmountOptionSerializer(cfg["amounts"], many=True).data,
            "tenors": DepositTenorOptionSerializer(cfg["tenors"], many=True).data,
            "interest_rate": cfg["interest_rate"],
            "calculation_method": cfg["calculation_method"],
        })


@extend_schema_view(
    get=extend_schema(
        tags=["Deposit Options"],
        summary="Daftar opsi (amount | tenor)",
        parameters=[q_str("activeOnly", "true untuk opsi aktif saja")],
        responses={200: DepositAmountOptionSerializer(many=True), **std_errors()},
    ),
    post=extend_schema(
        tags=["Deposit Options"],
        summary="Tambah opsi",
        request=DepositAmountOptionSerializer,
        responses={201: DepositAmountOptionSerializer, **std_errors()},
    ),
)
class DepositOptionListCreateView(_OptionMixin, APIView):
    def get(self, request, kind: str):
        ser_cls = self.serializer_for(kind)
        active_only = bool(as_bool(request.query_params.get("activeOnly")))
        return Response(ser_cls(deposit_option_service.list_options(kind, active_only), many=True).data)

    def post(self, request, kind: str):
        ser_cls = self.serializer_for(kind)
        ser = ser_cls(data=request.data)
        ser.is_valid(raise_exception=True)
        obj = deposit_option_service.create_option(kind, ser.validated_data)
        return Response(ser_cls(obj).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        tags=["Deposit Options"],
        summary="Detail opsi",
        parameters=[path_int("pk", "ID opsi")],
        responses={200: DepositAmountOptionSerializer, **std_errors()},
    ),
    patch=extend_schema(
        tags=["Deposit Options"],
        summary="Ubah opsi",
        parameters=[path_int("pk", "ID opsi")],
        request=DepositAmountOptionSerializer,
        responses={200: DepositAmountOptionSerializer, **std_errors()},
    ),
    delete=extend_schema(
        tags=["Deposit Options"],
        summary="Hapus opsi",
        parameters=[path_int("pk", "ID opsi")],
        responses={204: None, **std_errors()},
    ),
)
class DepositOptionDetailView(_OptionMixin, APIView):
    def get(self, request, kind: str, pk: int):
        ser_cls = self.serializer_for(kind)
        return Response(ser_cls(deposit_option_service.get_option(kind, pk)).data)

    def patch(self, request, kind: str, pk: int):
        ser_cls = self.serializer_for(kind)
        obj = deposit_option_service.get_option(kind, pk)
        ser = ser_cls(obj, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        obj = deposit_option_service.update_option(obj, ser.validated_data)
        return Response(ser_cls(obj).data)

    def delete(self, request, kind: str, pk: int):
        obj = deposit_option_service.get_option(kind, pk)
        deposit_option_service.delete_option(obj)
        return Response(status=status.HTTP_204_NO_CONTENT)
