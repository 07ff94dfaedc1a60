# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import (
    CashLoanDetail, GoodsOnlineDetail, GoodsPhoneDetail, GoodsReimburseDetail,
    LoanApplication, LoanAuthorization, LoanDisbursement, LoanInstallment,
)
from .common import UserBriefSerializer, WorkflowTrailSerializer


class CashLoanDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = CashLoanDetail
        fields = ["notes"]


class GoodsReimburseDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = GoodsReimburseDetail
        fields = ["item_name", "item_price", "purchase_date", "notes"]


class GoodsOnlineDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = GoodsOnlineDetail
        fields = ["item_name", "item_price", "item_url", "notes"]


class GoodsPhoneDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = GoodsPhoneDetail
        fields = ["item_name", "retail_price", "cooperative_price", "notes"]


DETAIL_SERIALIZERS = {
    LoanApplication.LoanType.CASH_LOAN: ("cash_detail", CashLoanDetailSerializer),
    LoanApplication.LoanType.GOODS_REIMBURSE: ("reimburse_detail", GoodsReimburseDetailSerializer),
    LoanApplication.LoanType.GOODS_ONLINE: ("online_detail", GoodsOnlineDetailSerializer),
    LoanApplication.LoanType.GOODS_PHONE: ("phone_detail", GoodsPhoneDetailSerializer),
}


class LoanDisbursementSerializer(serializers.ModelSerializer):
    processed_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = LoanDisbursement
        fields = ["disbursement_date", "processed_by", "notes", "created_at"]


class LoanAuthorizationSerializer(serializers.ModelSerializer):
    authorized_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = LoanAuthorization
        fields = ["authorization_date", "authorized_by", "notes", "created_at"]


class LoanInstallmentSerializer(serializers.ModelSerializer):
    payroll_period = serializers.CharField(source="payroll_period.name", read_only=True, default=None)

    class Meta:
        model = LoanInstallment
        fields = ["id", "installment_number", "due_date", "amount", "is_paid", "paid_at", "payroll_period"]


class LoanReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    loan_type_display = serializers.CharField(source="get_loan_type_display", read_only=True)
    detail = serializers.SerializerMethodField()

    class Meta:
        model = LoanApplication
        fields = [
            "id", "loan_number", "user", "loan_type", "loan_type_display",
            "loan_amount", "loan_tenor", "loan_purpose", "bank_account_number",
            "interest_rate", "shop_margin_rate", "total_interest", "total_repayment", "monthly_installment",
            "status", "status_display", "current_step", "revision_count", "detail",
            "submitted_at", "approved_at", "rejected_at", "cancelled_at", "disbursed_at", "completed_at",
            "rejection_reason", "created_at", "updated_at",
        ]

    def get_detail(self, obj):
        attr, ser = DETAIL_SERIALIZERS[obj.loan_type]
        detail = getattr(obj, attr, None)
        return ser(detail).data if detail else None


class LoanDetailSerializer(LoanReadSerializer, WorkflowTrailSerializer):
    disbursement = LoanDisbursementSerializer(read_only=True, default=None)
    authorization = LoanAuthorizationSerializer(read_only=True, default=None)
    installments = LoanInstallmentSerializer(many=True, read_only=True)

    class Meta(LoanReadSerializer.Meta):
        fields = LoanReadSerializer.Meta.fields + ["disbursement", "authorization", "installments", "approvals", "history"]


# ===== Member writes =====
class LoanWriteSerializer(serializers.Serializer):
    loan_type = serializers.ChoiceField(choices=LoanApplication.LoanType.choices)
    loan_amount = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    loan_tenor = serializers.IntegerField(min_value=1)
    loan_purpose = serializers.CharField(required=False, allow_blank=True, default="")
    bank_account_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    # type specific
    item_name = serializers.CharField(required=False, max_length=255)
    item_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    item_url = serializers.URLField(required=False, allow_blank=True)
    purchase_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        t = attrs["loan_type"]
        T = LoanApplication.LoanType
        errors = {}
        if t == T.CASH_LOAN and attrs.get("loan_amount") is None:
            errors["loan_amount"] = "Jumlah pinjaman wajib diisi"
        if t in (T.GOODS_REIMBURSE, T.GOODS_ONLINE, T.GOODS_PHONE) and not attrs.get("item_name"):
            errors["item_name"] = "Nama barang wajib diisi"
        if t in (T.GOODS_REIMBURSE, T.GOODS_ONLINE) and attrs.get("item_price") is None:
            errors["item_price"] = "Harga barang wajib diisi"
        if t == T.GOODS_REIMBURSE and not attrs.get("purchase_date"):
            errors["purchase_date"] = "Tanggal pembelian wajib diisi"
        if t == T.GOODS_ONLINE and not attrs.get("item_url"):
            errors["item_url"] = "Link barang wajib diisi"
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class LoanUpdateSerializer(serializers.Serializer):
    loan_amount = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    loan_tenor = serializers.IntegerField(min_value=1, required=False)
    loan_purpose = serializers.CharField(required=False, allow_blank=True)
    bank_account_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    item_name = serializers.CharField(required=False, max_length=255)
    item_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    item_url = serializers.URLField(required=False, allow_blank=True)
    purchase_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class LoanPreviewSerializer(serializers.Serializer):
    loan_type = serializers.ChoiceField(choices=LoanApplication.LoanType.choices)
    loan_amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    loan_tenor = serializers.IntegerField(min_value=1)


# ===== DSP revision =====
class LoanReviseSerializer(serializers.Serializer):
    loan_amount = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    loan_tenor = serializers.IntegerField(min_value=1, required=False)
    item_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    retail_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    cooperative_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    notes = serializers.CharField(required=True, allow_blank=False)


# ===== Shopkeeper / Ketua =====
class DisbursementSerializer(serializers.Serializer):
    disbursement_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AuthorizationSerializer(serializers.Serializer):
    authorization_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BulkDisbursementSerializer(DisbursementSerializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=100)


class BulkAuthorizationSerializer(AuthorizationSerializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=100)
