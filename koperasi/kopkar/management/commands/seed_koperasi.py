# -*- coding: utf-8 -*-
from __future__ import annotations
from django.core.management.base import BaseCommand

from kopkar.models import Level
from kopkar.services import settings_service
from kopkar.utils.roles import ALL_ROLES


class Command(BaseCommand):
    help = "Create the role levels and the default cooperative settings."

    def handle(self, *args, **opts):
        created = 0
        for name in ALL_ROLES:
            _, was_created = Level.objects.get_or_create(level_name=name)
            created += int(was_created)
        settings_created = settings_service.seed_defaults()
        self.stdout.write(self.style.SUCCESS(f"levels: +{created}, settings: +{settings_created}"))
