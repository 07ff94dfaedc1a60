from django.db import models
from .mixins import TimeStampedModel
from .account import User


class PayrollPeriod(TimeStampedModel):
    month = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=64)
    start_date = models.DateField()
    end_date = models.DateField()
    is_processed = models.BooleanField(default=False)
    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    total_amount = models.DecimalField(max_digits=17, decimal_places=2, default=0)
    summary = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "PayrollPeriod"
        ordering = ["-year", "-month"]
        unique_together = [("month", "year")]

    def __str__(self):
        return self.name
