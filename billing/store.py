# billing/store.py
"""
Store client for the ``billings`` table.

Every operation either returns its result or raises ``StoreError`` whose
message is shown to the user as-is. Callers never touch the ORM directly,
so the list, the form and the exports all go through the same four calls.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from .models import Billing

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A store operation failed; ``message`` is human-readable."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class BillingStore:
    """CRUD access to billing entries"""

    model = Billing

    def select(self, date_from, date_to, clinic=None):
        """
        Entries with date_from <= bill_date <= date_to, oldest first

        Args:
            date_from: Inclusive lower bound
            date_to: Inclusive upper bound
            clinic: Clinic value to match, or None for all clinics

        Returns:
            List of Billing rows
        """
        queryset = self.model.objects.filter(
            bill_date__gte=date_from,
            bill_date__lte=date_to
        )
        if clinic:
            queryset = queryset.filter(clinic=clinic)

        try:
            return list(queryset.order_by('bill_date', 'created_at'))
        except DatabaseError as e:
            logger.error(f"Billing query failed ({date_from} to {date_to}, clinic={clinic}): {e}")
            raise StoreError(str(e)) from e

    def get(self, entry_id):
        try:
            return self.model.objects.get(pk=entry_id)
        except (self.model.DoesNotExist, ValidationError) as e:
            raise StoreError('Billing entry not found.') from e
        except DatabaseError as e:
            logger.error(f"Failed to load billing entry {entry_id}: {e}")
            raise StoreError(str(e)) from e

    def insert(self, user_name, bill_date, clinic, gross_billing, notes=''):
        try:
            entry = self.model.objects.create(
                user_name=user_name,
                bill_date=bill_date,
                clinic=clinic,
                gross_billing=gross_billing,
                notes=notes
            )
        except DatabaseError as e:
            logger.error(f"Failed to insert billing entry for {bill_date} at {clinic}: {e}")
            raise StoreError(str(e)) from e

        logger.info(f"Inserted billing entry {entry.pk} ({bill_date}, {clinic}, {gross_billing})")
        return entry

    def update(self, entry_id, bill_date, clinic, gross_billing, notes=''):
        """Full-field update keyed by id; user_name is left untouched"""
        try:
            with transaction.atomic():
                entry = self.model.objects.select_for_update().get(pk=entry_id)
                entry.bill_date = bill_date
                entry.clinic = clinic
                entry.gross_billing = gross_billing
                entry.notes = notes
                entry.save()
        except (self.model.DoesNotExist, ValidationError) as e:
            logger.error(f"Failed to update billing entry {entry_id}: not found")
            raise StoreError('Billing entry not found.') from e
        except DatabaseError as e:
            logger.error(f"Failed to update billing entry {entry_id}: {e}")
            raise StoreError(str(e)) from e

        logger.info(f"Updated billing entry {entry_id} ({bill_date}, {clinic}, {gross_billing})")
        return entry

    def delete(self, entry_id):
        try:
            deleted, _ = self.model.objects.filter(pk=entry_id).delete()
        except ValidationError as e:
            raise StoreError('Billing entry not found.') from e
        except DatabaseError as e:
            logger.error(f"Failed to delete billing entry {entry_id}: {e}")
            raise StoreError(str(e)) from e

        if not deleted:
            logger.error(f"Failed to delete billing entry {entry_id}: not found")
            raise StoreError('Billing entry not found.')

        logger.info(f"Deleted billing entry {entry_id}")
