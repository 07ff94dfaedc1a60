# -*- coding: utf-8 -*-
"""Buku tabungan: saldo per kolom + ledger transaksi."""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied
from django.db.models import QuerySet

from kopkar.models import SavingsAccount, SavingsTransaction, User
from kopkar.repositories import savings_repository as repo, user_repository
from kopkar.repositories.savings_repository import LEDGER_COLUMNS

CSV_HEADER = [
    "tanggal", "periode", "iuran_pendaftaran", "iuran_bulanan", "tabungan_deposito",
    "shu", "penarikan", "bunga", "suku_bunga", "catatan",
]


def _account_of(user_id: int) -> SavingsAccount:
    account = repo.get_account(user_id)
    if account is None:
        raise ObjectDoesNotExist("Buku tabungan tidak ditemukan")
    return account

def summary(account: SavingsAccount, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    totals = repo.totals(repo.transactions_for(account.id, filters))
    return {
        "account": account,
        "balances": {
            "saldo_pokok": account.saldo_pokok,
            "saldo_wajib": account.saldo_wajib,
            "saldo_sukarela": account.saldo_sukarela,
            "bunga_deposito": account.bunga_deposito,
            "total_saldo": account.total_saldo,
        },
        "transaction_totals": totals,
        "net_movement": sum((v for k, v in totals.items() if k != "penarikan"), Decimal("0")) - totals["penarikan"],
    }

def my_account(user: User) -> Dict[str, Any]:
    if not user.member_verified:
        raise PermissionDenied("Anda harus menjadi anggota terverifikasi untuk mengakses fitur ini")
    return summary(_account_of(user.id))

def my_transactions(user: User, filters: Dict[str, Any]) -> QuerySet[SavingsTransaction]:
    return repo.transactions_for(_account_of(user.id).id, filters)

def account_of_user(user_id: int) -> Dict[str, Any]:
    if user_repository.get_by_id(user_id) is None:
        raise ObjectDoesNotExist("User tidak ditemukan")
    return summary(_account_of(user_id))

def transactions_of_user(user_id: int, filters: Dict[str, Any]) -> QuerySet[SavingsTransaction]:
    return repo.transactions_for(_account_of(user_id).id, filters)

def csv_rows(qs: QuerySet[SavingsTransaction]) -> Iterator[List[Any]]:
    yield CSV_HEADER
    for tx in qs.iterator(chunk_size=500):
        yield (
            [tx.transaction_date.isoformat(), tx.payroll_period.name if tx.payroll_period else ""]
            + [getattr(tx, col) for col in LEDGER_COLUMNS]
            + [tx.interest_rate if tx.interest_rate is not None else "", tx.note]
        )
