# -*- coding: utf-8 -*-
from __future__ import annotations
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from kopkar.services import payroll_service
from kopkar.utils.exceptions import Conflict


class Command(BaseCommand):
    help = "Process the monthly payroll (fees, deposits, installments, interest) for a period."

    def add_arguments(self, parser):
        today = timezone.localdate()
        parser.add_argument("--month", type=int, default=today.month)
        parser.add_argument("--year", type=int, default=today.year)

    def handle(self, *args, **opts):
        try:
            period = payroll_service.process_payroll(month=opts["month"], year=opts["year"])
        except Conflict as ex:
            raise CommandError(str(ex.detail))
        self.stdout.write(self.style.SUCCESS(f"{period.name}: total {period.total_amount}"))
        for key, value in (period.summary or {}).items():
            self.stdout.write(f"  {key}: {value}")
