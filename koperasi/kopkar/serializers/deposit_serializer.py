# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import (
    DepositAmountOption, DepositApplication, DepositChangeRequest, DepositTenorOption, DepositWithdrawal,
)
from kopkar.services import deposit_change_service
from .common import UserBriefSerializer, WorkflowTrailSerializer


class DepositAmountOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DepositAmountOption
        fields = ["id", "code", "label", "amount", "is_active", "sort_order"]


class DepositTenorOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DepositTenorOption
        fields = ["id", "code", "label", "months", "is_active", "sort_order"]


class DepositReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = DepositApplication
        fields = [
            "id", "deposit_number", "user", "amount_code", "tenor_code", "amount_value", "tenor_months",
            "interest_rate", "projected_interest", "total_return", "agreed_to_terms",
            "status", "status_display", "current_step",
            "installment_count", "collected_amount", "last_installment_date", "activated_at", "maturity_date",
            "submitted_at", "approved_at", "rejected_at", "cancelled_at", "completed_at", "rejection_reason",
            "created_at", "updated_at",
        ]


class DepositDetailSerializer(DepositReadSerializer, WorkflowTrailSerializer):
    class Meta(DepositReadSerializer.Meta):
        fields = DepositReadSerializer.Meta.fields + ["approvals", "history"]


class DepositWriteSerializer(serializers.Serializer):
    amount_code = serializers.CharField(max_length=32)
    tenor_code = serializers.CharField(max_length=32)
    agreed_to_terms = serializers.BooleanField(default=False)


class DepositUpdateSerializer(serializers.Serializer):
    amount_code = serializers.CharField(max_length=32, required=False)
    tenor_code = serializers.CharField(max_length=32, required=False)
    agreed_to_terms = serializers.BooleanField(required=False)


class DepositCalculationSerializer(serializers.Serializer):
    amount_code = serializers.CharField(max_length=32)
    tenor_code = serializers.CharField(max_length=32)


class DepositBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = DepositApplication
        fields = ["id", "deposit_number", "amount_value", "tenor_months", "collected_amount", "maturity_date", "status"]


# ===== Deposit withdrawal =====
class DepositWithdrawalReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    deposit = DepositBriefSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = DepositWithdrawal
        fields = [
            "id", "withdrawal_number", "user", "deposit", "withdrawal_amount",
            "is_early_withdrawal", "penalty_rate", "penalty_amount", "net_amount",
            "bank_account_number", "reason", "status", "status_display", "current_step",
            "submitted_at", "approved_at", "rejected_at", "cancelled_at",
            "disbursed_at", "authorized_at", "completed_at", "rejection_reason", "created_at", "updated_at",
        ]


class DepositWithdrawalDetailSerializer(DepositWithdrawalReadSerializer, WorkflowTrailSerializer):
    class Meta(DepositWithdrawalReadSerializer.Meta):
        fields = DepositWithdrawalReadSerializer.Meta.fields + ["approvals", "history"]


class DepositWithdrawalCreateSerializer(serializers.Serializer):
    deposit_id = serializers.IntegerField()
    withdrawal_amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=1)
    bank_account_number = serializers.CharField(required=False, allow_blank=True, max_length=32, default="")
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class DepositWithdrawalCalculationSerializer(serializers.Serializer):
    deposit_id = serializers.IntegerField()
    withdrawal_amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=1)


# ===== Deposit change =====
class DepositChangeReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    deposit = DepositBriefSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    change_type_display = serializers.CharField(source="get_change_type_display", read_only=True)

    class Meta:
        model = DepositChangeRequest
        fields = [
            "id", "change_number", "user", "deposit", "change_type", "change_type_display",
            "current_amount_code", "current_amount_value", "current_tenor_code", "current_tenor_months",
            "new_amount_code", "new_amount_value", "new_tenor_code", "new_tenor_months",
            "admin_fee", "agreed_to_terms", "agreed_to_admin_fee",
            "status", "status_display", "current_step",
            "submitted_at", "approved_at", "rejected_at", "cancelled_at", "rejection_reason",
            "created_at", "updated_at",
        ]


class DepositChangeDetailSerializer(DepositChangeReadSerializer, WorkflowTrailSerializer):
    comparison = serializers.SerializerMethodField()

    class Meta(DepositChangeReadSerializer.Meta):
        fields = DepositChangeReadSerializer.Meta.fields + ["comparison", "approvals", "history"]

    def get_comparison(self, obj):
        return deposit_change_service.comparison(obj)


class DepositChangeWriteSerializer(serializers.Serializer):
    deposit_id = serializers.IntegerField()
    new_amount_code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    new_tenor_code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    agreed_to_terms = serializers.BooleanField(default=False)
    agreed_to_admin_fee = serializers.BooleanField(default=False)


class DepositChangeUpdateSerializer(serializers.Serializer):
    new_amount_code = serializers.CharField(max_length=32, required=False)
    new_tenor_code = serializers.CharField(max_length=32, required=False)
    agreed_to_terms = serializers.BooleanField(required=False)
    agreed_to_admin_fee = serializers.BooleanField(required=False)
