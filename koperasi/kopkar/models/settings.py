from django.db import models
from .mixins import TimeStampedModel


class CooperativeSetting(TimeStampedModel):
    class Category(models.TextChoices):
        GENERAL = "GENERAL", "Umum"
        MEMBERSHIP = "MEMBERSHIP", "Keanggotaan"
        LOAN = "LOAN", "Pinjaman"
        DEPOSIT = "DEPOSIT", "Deposito"
        SAVINGS = "SAVINGS", "Tabungan"

    key = models.CharField(max_length=64, unique=True)
    value = models.CharField(max_length=255)
    category = models.CharField(max_length=16, choices=Category.choices, default=Category.GENERAL, db_index=True)
    label = models.CharField(max_length=150, blank=True, default="")
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["category", "key"]
        db_table = "CooperativeSetting"

    def __str__(self):
        return f"{self.key}={self.value}"


class ApprovalFlow(TimeStampedModel):
    """Ordered approver roles per approvable object type; overrides the code default."""
    object_type = models.CharField(max_length=32)
    role = models.CharField(max_length=32)
    step = models.IntegerField(default=1)

    class Meta:
        db_table = "ApprovalFlow"
        unique_together = [("object_type", "role"), ("object_type", "step")]
        ordering = ["object_type", "step"]
        indexes = [models.Index(fields=["object_type", "role"])]

    def __str__(self):
        return f"{self.object_type} - {self.role} - step {self.step}"
