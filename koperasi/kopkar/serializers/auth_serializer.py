# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=150, error_messages={"min_length": "Nama minimal 3 karakter"})
    email = serializers.EmailField(error_messages={"invalid": "Format email tidak valid"})
    employee_number = serializers.CharField(max_length=32)
    password = serializers.CharField(write_only=True)
    conf_password = serializers.CharField(write_only=True)


class LoginSerializer(serializers.Serializer):
    email_or_nik = serializers.CharField()
    password = serializers.CharField(write_only=True)


class TokenSerializer(serializers.Serializer):
    token = serializers.CharField()


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True)
    conf_password = serializers.CharField(write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)
    confirm_password = serializers.CharField(write_only=True)


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=150, required=False)
    date_of_birth = serializers.DateField(required=False)
    birth_place = serializers.CharField(max_length=100, required=False, allow_blank=True)
    bank_account_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
