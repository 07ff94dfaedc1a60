from django.db import models
from .mixins import TimeStampedModel


class Level(TimeStampedModel):
    """Role held by a user (ketua, divisi_simpan_pinjam, pengawas, ...)."""
    level_name = models.CharField(max_length=64, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["level_name"]
        db_table = "Level"

    def __str__(self):
        return self.level_name


class Department(TimeStampedModel):
    name = models.CharField(max_length=120, unique=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        db_table = "Department"

    def __str__(self):
        return self.name


class Golongan(TimeStampedModel):
    """Pay grade; drives the cash loan ceiling together with years of service."""
    name = models.CharField(max_length=32, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["name"]
        db_table = "Golongan"

    def __str__(self):
        return self.name


class LoanLimit(TimeStampedModel):
    golongan = models.ForeignKey(Golongan, on_delete=models.CASCADE, related_name="loan_limits")
    min_years_of_service = models.PositiveIntegerField(default=0)
    max_years_of_service = models.PositiveIntegerField(null=True, blank=True, help_text="Kosong = tanpa batas atas")
    max_loan_amount = models.DecimalField(max_digits=15, decimal_places=2)

    class Meta:
        ordering = ["golongan_id", "min_years_of_service"]
        db_table = "LoanLimit"
        unique_together = [("golongan", "min_years_of_service")]

    def __str__(self):
        upper = self.max_years_of_service if self.max_years_of_service is not None else "+"
        return f"{self.golongan} {self.min_years_of_service}-{upper} th: {self.max_loan_amount}"

    def covers(self, years: int) -> bool:
        if years < self.min_years_of_service:
            return False
        return self.max_years_of_service is None or years <= self.max_years_of_service
