# -*- coding: utf-8 -*-
"""
Per loan-type behaviour: which detail record it owns, how the requested
amount is derived and checked, and what the DSP may revise.
"""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError

from kopkar.models import (
    LoanApplication, CashLoanDetail, GoodsReimburseDetail, GoodsOnlineDetail, GoodsPhoneDetail, LoanLimit,
)
from kopkar.repositories.base import save_fields
from kopkar.services import settings_service
from kopkar.services.loan_calculation import years_of_service

T = LoanApplication.LoanType


def _fmt(amount: Decimal) -> str:
    return f"Rp {int(amount):,}".replace(",", ".")


class LoanTypeHandler:
    loan_type: str = ""
    detail_model: Any = None
    detail_attr: str = ""
    detail_fields: tuple = ()
    revise_fields: tuple = ()

    # ---- limits ----
    def max_amount(self, user) -> Decimal:
        return settings_service.get_decimal("max_goods_loan_amount")

    def validate_amount(self, user, amount: Decimal) -> None:
        minimum = settings_service.get_decimal("min_loan_amount")
        maximum = self.max_amount(user)
        if amount > maximum:
            raise ValidationError({"loan_amount": [f"Jumlah pinjaman maksimal {_fmt(maximum)}"]})
        if amount < minimum:
            raise ValidationError({"loan_amount": [f"Jumlah pinjaman minimal {_fmt(minimum)}"]})

    def validate_on_submit(self, loan: LoanApplication) -> None:
        self.validate_amount(loan.user, loan.loan_amount)

    def shop_margin_rate(self) -> Optional[Decimal]:
        return None

    # ---- details ----
    def amount_from(self, data: Dict[str, Any]) -> Optional[Decimal]:
        return data.get("loan_amount")

    def get_detail(self, loan: LoanApplication):
        return self.detail_model.objects.filter(loan=loan).first()

    def create_detail(self, loan: LoanApplication, data: Dict[str, Any]):
        return self.detail_model.objects.create(loan=loan, **{k: data[k] for k in self.detail_fields if k in data})

    def update_detail(self, loan: LoanApplication, data: Dict[str, Any]) -> None:
        detail = self.get_detail(loan)
        patch = {k: data[k] for k in self.detail_fields if k in data}
        if detail and patch:
            save_fields(detail, patch)

    def revise_detail(self, loan: LoanApplication, data: Dict[str, Any]) -> None:
        detail = self.get_detail(loan)
        patch = {k: data[k] for k in self.revise_fields if data.get(k) is not None}
        if detail and patch:
            save_fields(detail, patch)


class CashLoanHandler(LoanTypeHandler):
    loan_type = T.CASH_LOAN
    detail_model = CashLoanDetail
    detail_attr = "cash_detail"
    detail_fields = ("notes",)

    def max_amount(self, user) -> Decimal:
        emp = getattr(user, "employee", None)
        if emp is None or emp.golongan_id is None:
            raise ValidationError("Golongan karyawan belum diatur")
        years = years_of_service(emp)
        limit = next(
            (l for l in LoanLimit.objects.filter(golongan_id=emp.golongan_id).order_by("min_years_of_service") if l.covers(years)),
            None,
        )
        if limit is None:
            raise ValidationError(
                f"Tidak ada plafond pinjaman untuk golongan {emp.golongan.name} dengan masa kerja {years} tahun"
            )
        if limit.max_loan_amount <= 0:
            raise ValidationError(
                f"Plafond pinjaman untuk masa kerja {years} tahun adalah 0. Anda belum memenuhi syarat."
            )
        return limit.max_loan_amount


class GoodsReimburseHandler(LoanTypeHandler):
    loan_type = T.GOODS_REIMBURSE
    detail_model = GoodsReimburseDetail
    detail_attr = "reimburse_detail"
    detail_fields = ("item_name", "item_price", "purchase_date", "notes")
    revise_fields = ("item_price",)

    def amount_from(self, data):
        return data.get("item_price", data.get("loan_amount"))


class GoodsOnlineHandler(LoanTypeHandler):
    loan_type = T.GOODS_ONLINE
    detail_model = GoodsOnlineDetail
    detail_attr = "online_detail"
    detail_fields = ("item_name", "item_price", "item_url", "notes")
    revise_fields = ("item_price",)

    def amount_from(self, data):
        return data.get("item_price", data.get("loan_amount"))

    def shop_margin_rate(self) -> Optional[Decimal]:
        return settings_service.get_decimal("shop_margin_rate")


class GoodsPhoneHandler(LoanTypeHandler):
    """Prices are set by the DSP during revision; the cooperative price is the loan amount."""
    loan_type = T.GOODS_PHONE
    detail_model = GoodsPhoneDetail
    detail_attr = "phone_detail"
    detail_fields = ("item_name", "notes")
    revise_fields = ("retail_price", "cooperative_price")

    def amount_from(self, data):
        return data.get("cooperative_price", data.get("loan_amount"))

    def validate_on_submit(self, loan: LoanApplication) -> None:
        return None


HANDLERS: Dict[str, LoanTypeHandler] = {
    h.loan_type: h for h in (CashLoanHandler(), GoodsReimburseHandler(), GoodsOnlineHandler(), GoodsPhoneHandler())
}


def handler_for(loan_type: str) -> LoanTypeHandler:
    try:
        return HANDLERS[loan_type]
    except KeyError:
        raise ValidationError({"loan_type": ["Tipe pinjaman tidak valid"]})
