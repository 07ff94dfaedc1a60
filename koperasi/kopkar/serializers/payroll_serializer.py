# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import PayrollPeriod
from .common import UserBriefSerializer


class PayrollPeriodSerializer(serializers.ModelSerializer):
    processed_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = PayrollPeriod
        fields = [
            "id", "month", "year", "name", "start_date", "end_date",
            "is_processed", "processed_at", "processed_by", "total_amount", "summary", "created_at",
        ]


class PayrollProcessSerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000, max_value=2100)


class PayrollStatusSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    name = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    payroll_date = serializers.DateField()
    is_processed = serializers.BooleanField()
    processed_at = serializers.DateTimeField(allow_null=True)
    total_amount = serializers.DecimalField(max_digits=17, decimal_places=2)
