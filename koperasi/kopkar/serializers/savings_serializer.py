# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import SavingsAccount, SavingsTransaction, SavingsWithdrawal
from .common import UserBriefSerializer, WorkflowTrailSerializer


# ===== Buku tabungan =====
class SavingsAccountSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    total_saldo = serializers.DecimalField(max_digits=17, decimal_places=2, read_only=True)

    class Meta:
        model = SavingsAccount
        fields = ["id", "user", "saldo_pokok", "saldo_wajib", "saldo_sukarela", "bunga_deposito", "total_saldo", "updated_at"]


class SavingsTransactionSerializer(serializers.ModelSerializer):
    payroll_period = serializers.CharField(source="payroll_period.name", read_only=True, default=None)

    class Meta:
        model = SavingsTransaction
        fields = [
            "id", "transaction_date", "payroll_period",
            "iuran_pendaftaran", "iuran_bulanan", "tabungan_deposito", "shu", "penarikan", "bunga",
            "interest_rate", "note",
        ]


class SavingsSummarySerializer(serializers.Serializer):
    account = SavingsAccountSerializer()
    balances = serializers.DictField(child=serializers.DecimalField(max_digits=17, decimal_places=2))
    transaction_totals = serializers.DictField(child=serializers.DecimalField(max_digits=17, decimal_places=2))
    net_movement = serializers.DecimalField(max_digits=17, decimal_places=2)


# ===== Withdrawal =====
class SavingsWithdrawalReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = SavingsWithdrawal
        fields = [
            "id", "withdrawal_number", "user", "withdrawal_amount",
            "has_early_deposit_penalty", "early_deposit_penalty_rate", "early_deposit_penalty_amount", "net_amount",
            "bank_account_number", "reason", "status", "status_display", "current_step",
            "submitted_at", "approved_at", "rejected_at", "cancelled_at",
            "disbursed_at", "authorized_at", "completed_at", "rejection_reason", "created_at", "updated_at",
        ]


class SavingsWithdrawalDetailSerializer(SavingsWithdrawalReadSerializer, WorkflowTrailSerializer):
    class Meta(SavingsWithdrawalReadSerializer.Meta):
        fields = SavingsWithdrawalReadSerializer.Meta.fields + ["approvals", "history"]


class SavingsWithdrawalCreateSerializer(serializers.Serializer):
    withdrawal_amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=1)
    bank_account_number = serializers.CharField(required=False, allow_blank=True, max_length=32, default="")
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class SavingsWithdrawalCalculationSerializer(serializers.Serializer):
    withdrawal_amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=1)
