# billing/forms.py
import re
from decimal import Decimal

from django import forms

from core.utils import get_local_today, get_month_start, parse_iso_date
from .models import Clinic

ALL_CLINICS = 'All'

# Billing.gross_billing is DECIMAL(12, 2)
MAX_GROSS_BILLING = Decimal('9999999999.99')

# Plain decimal notation: no digit grouping, no NaN or Infinity
AMOUNT_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')

INPUT_CLASS = 'mt-1 block w-full rounded-md border-gray-300 shadow-sm focus:border-primary-500 focus:ring-primary-500'


class BillingEntryForm(forms.Form):
    """Create or edit one billing entry; editing_id switches to edit mode"""

    editing_id = forms.UUIDField(required=False, widget=forms.HiddenInput())

    bill_date = forms.DateField(
        label='Date',
        input_formats=['%Y-%m-%d'],
        widget=forms.DateInput(format='%Y-%m-%d', attrs={
            'class': INPUT_CLASS,
            'type': 'date'
        })
    )

    clinic = forms.ChoiceField(
        label='Clinic',
        choices=Clinic.choices,
        widget=forms.Select(attrs={'class': INPUT_CLASS})
    )

    # Kept as text so the number is parsed (and rejected) by clean_gross_billing
    gross_billing = forms.CharField(
        label='Gross billing (AUD)',
        max_length=32,
        widget=forms.TextInput(attrs={
            'class': INPUT_CLASS,
            'inputmode': 'decimal',
            'placeholder': '0.00'
        })
    )

    notes = forms.CharField(
        label='Notes (optional)',
        required=False,
        strip=False,
        widget=forms.TextInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'e.g., session details'
        })
    )

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('initial', self.default_initial())
        super().__init__(*args, **kwargs)

    @staticmethod
    def default_initial():
        """Today's date, first clinic, empty amount and notes"""
        return {
            'bill_date': get_local_today(),
            'clinic': Clinic.values[0],
            'gross_billing': '',
            'notes': '',
        }

    @classmethod
    def for_entry(cls, entry):
        """Unbound form pre-filled from an existing entry (edit mode)"""
        return cls(initial={
            'editing_id': entry.pk,
            'bill_date': entry.bill_date,
            'clinic': entry.clinic,
            'gross_billing': str(entry.gross_billing),
            'notes': entry.notes or '',
        })

    @property
    def is_editing(self):
        if self.is_bound:
            return bool(self.data.get('editing_id'))
        return bool(self.initial.get('editing_id'))

    def clean_gross_billing(self):
        """Amount must be a plain, non-negative number with at most 2 decimal places"""
        raw = (self.cleaned_data.get('gross_billing') or '').strip()

        if not AMOUNT_PATTERN.match(raw):
            raise forms.ValidationError('Enter a valid gross billing number')

        amount = Decimal(raw)

        if amount < 0:
            raise forms.ValidationError('Gross billing cannot be negative.')

        if amount > MAX_GROSS_BILLING:
            raise forms.ValidationError('Gross billing is too large.')

        cents = amount.quantize(Decimal('0.01'))
        if cents != amount:
            raise forms.ValidationError('Gross billing can have at most 2 decimal places.')

        # -0 is stored as 0
        return cents.copy_abs()


class ReportFilterForm(forms.Form):
    """Report range and clinic filter, read from the query string"""

    date_from = forms.DateField(
        label='From',
        widget=forms.DateInput(format='%Y-%m-%d', attrs={'class': INPUT_CLASS, 'type': 'date'})
    )

    date_to = forms.DateField(
        label='To',
        widget=forms.DateInput(format='%Y-%m-%d', attrs={'class': INPUT_CLASS, 'type': 'date'})
    )

    clinic = forms.ChoiceField(
        label='Clinic',
        choices=[(ALL_CLINICS, ALL_CLINICS)] + list(Clinic.choices),
        widget=forms.Select(attrs={'class': INPUT_CLASS})
    )

    @classmethod
    def from_query(cls, params):
        """
        Resolve filters from request parameters

        Missing or malformed dates fall back to the current month up to
        today; an unknown clinic falls back to All.
        """
        today = get_local_today()
        clinic = params.get('clinic') or ALL_CLINICS
        if clinic not in Clinic.values:
            clinic = ALL_CLINICS

        return cls(auto_id='filter_%s', initial={
            'date_from': parse_iso_date(params.get('date_from'), get_month_start(today)),
            'date_to': parse_iso_date(params.get('date_to'), today),
            'clinic': clinic,
        })

    @property
    def date_range(self):
        return self.initial['date_from'], self.initial['date_to']

    @property
    def clinic_filter(self):
        """Clinic value to filter on, or None for All"""
        clinic = self.initial['clinic']
        return None if clinic == ALL_CLINICS else clinic

    def as_query(self):
        return {
            'date_from': self.initial['date_from'].isoformat(),
            'date_to': self.initial['date_to'].isoformat(),
            'clinic': self.initial['clinic'],
        }
