# billing/models.py
import uuid

from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Clinic(models.TextChoices):
    HEMAC = 'Hemac', 'Hemac'
    MM_BALWYN = 'MM Balwyn', 'MM Balwyn'
    FNMC = 'FNMC', 'FNMC'
    NOVABODY = 'NovaBody', 'NovaBody'


class Billing(models.Model):
    """
    One day's gross billing at one clinic, logged by the practitioner.

    Rows live in the ``billings`` table; ids and timestamps are assigned
    by the store, never by the form.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_name = models.CharField(max_length=200)
    bill_date = models.DateField()
    clinic = models.CharField(max_length=20, choices=Clinic.choices)
    gross_billing = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'billings'
        ordering = ['bill_date', 'created_at']
        indexes = [
            models.Index(fields=['bill_date'], name='billings_bill_date_idx'),
            models.Index(fields=['clinic', 'bill_date'], name='billings_clinic_date_idx'),
        ]
        verbose_name = 'Billing Entry'
        verbose_name_plural = 'Billing Entries'

    def __str__(self):
        return f"{self.bill_date} - {self.clinic} - {self.gross_billing}"
