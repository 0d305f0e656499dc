# billing/tests.py
"""
Unit tests for the daily billing tracker
"""
from datetime import date
from decimal import Decimal
from unittest.mock import patch
from urllib.parse import urlencode

from django.test import TestCase, SimpleTestCase, Client
from django.urls import reverse

from core.models import SystemSetting
from core.utils import get_local_today, get_month_start
from .csv_export import build_csv, export_filename, export_rows
from .forms import BillingEntryForm, ReportFilterForm
from .models import Billing, Clinic
from .report import compute_total, format_amount
from .store import BillingStore, StoreError
from .templatetags.billing_filters import aud


def make_entry(bill_date, gross, clinic=Clinic.HEMAC, notes=''):
    return Billing.objects.create(
        user_name='Dr Premila Hewage',
        bill_date=bill_date,
        clinic=clinic,
        gross_billing=Decimal(gross),
        notes=notes
    )


def tracker_url(**params):
    return f"{reverse('billing:tracker')}?{urlencode(params)}"


JANUARY = {'date_from': '2024-01-01', 'date_to': '2024-01-31', 'clinic': 'All'}


class BillingStoreTest(TestCase):
    """Test the store client over the billings table"""

    def setUp(self):
        self.store = BillingStore()
        self.hemac = make_entry(date(2024, 1, 3), '100', Clinic.HEMAC)
        self.fnmc = make_entry(date(2024, 1, 2), '50', Clinic.FNMC)
        self.outside = make_entry(date(2024, 2, 1), '25', Clinic.HEMAC)

    def test_select_is_inclusive_and_ordered(self):
        """Both bounds are inclusive and rows come back oldest first"""
        rows = self.store.select(date(2024, 1, 2), date(2024, 1, 3))

        self.assertEqual(rows, [self.fnmc, self.hemac])

    def test_select_filters_by_clinic(self):
        rows = self.store.select(date(2024, 1, 1), date(2024, 2, 28), Clinic.HEMAC)

        self.assertEqual(rows, [self.hemac, self.outside])

    def test_select_with_reversed_bounds_is_empty(self):
        rows = self.store.select(date(2024, 1, 31), date(2024, 1, 1))

        self.assertEqual(rows, [])

    def test_insert_and_update(self):
        entry = self.store.insert(
            user_name='Dr Premila Hewage',
            bill_date=date(2024, 1, 10),
            clinic=Clinic.NOVABODY,
            gross_billing=Decimal('320.50'),
            notes='first'
        )
        self.assertIsNotNone(entry.pk)
        self.assertIsNotNone(entry.created_at)

        updated = self.store.update(
            entry.pk,
            bill_date=date(2024, 1, 11),
            clinic=Clinic.MM_BALWYN,
            gross_billing=Decimal('10.00'),
            notes=''
        )
        updated.refresh_from_db()

        self.assertEqual(updated.bill_date, date(2024, 1, 11))
        self.assertEqual(updated.clinic, Clinic.MM_BALWYN)
        self.assertEqual(updated.gross_billing, Decimal('10.00'))
        self.assertEqual(updated.user_name, 'Dr Premila Hewage')

    def test_update_missing_entry_raises(self):
        entry_id = self.hemac.pk
        self.hemac.delete()

        with self.assertRaises(StoreError) as ctx:
            self.store.update(entry_id, date(2024, 1, 1), Clinic.HEMAC, Decimal('1'), '')

        self.assertEqual(ctx.exception.message, 'Billing entry not found.')

    def test_delete(self):
        self.store.delete(self.hemac.pk)

        self.assertFalse(Billing.objects.filter(pk=self.hemac.pk).exists())

        with self.assertRaises(StoreError):
            self.store.delete(self.hemac.pk)

    def test_get_with_malformed_id_raises(self):
        with self.assertRaises(StoreError):
            self.store.get('not-a-uuid')


class BillingEntryFormTest(SimpleTestCase):
    """Test entry form validation"""

    def form_data(self, **overrides):
        data = {
            'bill_date': '2024-01-02',
            'clinic': 'Hemac',
            'gross_billing': '100',
            'notes': '',
        }
        data.update(overrides)
        return data

    def test_valid_amount(self):
        form = BillingEntryForm(self.form_data(gross_billing='12.5'))

        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data['gross_billing'], Decimal('12.50'))
        self.assertIsNone(form.cleaned_data['editing_id'])

    def test_rejects_non_numeric_amounts(self):
        for value in ['abc', 'NaN', 'Infinity', '1,000', '1_00']:
            form = BillingEntryForm(self.form_data(gross_billing=value))
            self.assertFalse(form.is_valid(), value)
            self.assertIn('Enter a valid gross billing number', form.errors['gross_billing'])

    def test_rejects_more_than_two_decimal_places(self):
        form = BillingEntryForm(self.form_data(gross_billing='12.345'))

        self.assertFalse(form.is_valid())
        self.assertIn('Gross billing can have at most 2 decimal places.', form.errors['gross_billing'])

    def test_trailing_zero_decimals_are_accepted(self):
        form = BillingEntryForm(self.form_data(gross_billing='100.000'))

        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data['gross_billing'], Decimal('100.00'))

    def test_negative_zero_is_stored_as_zero(self):
        form = BillingEntryForm(self.form_data(gross_billing='-0'))

        self.assertTrue(form.is_valid())
        amount = form.cleaned_data['gross_billing']
        self.assertEqual(amount, Decimal('0.00'))
        self.assertFalse(amount.is_signed())

    def test_notes_keep_surrounding_whitespace(self):
        form = BillingEntryForm(self.form_data(notes='  indented note  '))

        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data['notes'], '  indented note  ')

    def test_rejects_negative_amount(self):
        form = BillingEntryForm(self.form_data(gross_billing='-5'))

        self.assertFalse(form.is_valid())
        self.assertIn('gross_billing', form.errors)

    def test_rejects_unknown_clinic(self):
        form = BillingEntryForm(self.form_data(clinic='Elsewhere'))

        self.assertFalse(form.is_valid())
        self.assertIn('clinic', form.errors)

    def test_defaults(self):
        form = BillingEntryForm()

        self.assertEqual(form.initial['bill_date'], get_local_today())
        self.assertEqual(form.initial['clinic'], 'Hemac')
        self.assertEqual(form.initial['gross_billing'], '')
        self.assertFalse(form.is_editing)


class ReportFilterFormTest(SimpleTestCase):
    """Test report filter resolution"""

    def test_defaults_to_current_month(self):
        form = ReportFilterForm.from_query({})
        today = get_local_today()

        self.assertEqual(form.date_range, (get_month_start(today), today))
        self.assertIsNone(form.clinic_filter)

    def test_malformed_values_fall_back(self):
        form = ReportFilterForm.from_query({
            'date_from': 'garbage',
            'date_to': '2024-01-31',
            'clinic': 'Elsewhere',
        })

        self.assertEqual(form.date_range[1], date(2024, 1, 31))
        self.assertEqual(form.date_range[0], get_month_start(get_local_today()))
        self.assertIsNone(form.clinic_filter)

    def test_specific_clinic(self):
        form = ReportFilterForm.from_query({'clinic': 'MM Balwyn'})

        self.assertEqual(form.clinic_filter, 'MM Balwyn')
        self.assertEqual(form.as_query()['clinic'], 'MM Balwyn')


class ReportTotalTest(SimpleTestCase):
    """Test derived total and amount formatting"""

    def test_total_over_rows(self):
        rows = [{'gross_billing': 100}, {'gross_billing': '50'}, {'gross_billing': Decimal('25')}]

        self.assertEqual(compute_total(rows), Decimal('175'))

    def test_missing_and_non_numeric_count_as_zero(self):
        rows = [{'gross_billing': 10}, {'gross_billing': None}, {'gross_billing': 'abc'}, {}]

        self.assertEqual(compute_total(rows), Decimal('10'))

    def test_empty_total(self):
        self.assertEqual(compute_total([]), Decimal('0'))

    def test_format_amount(self):
        self.assertEqual(format_amount(Decimal('100.00')), '100')
        self.assertEqual(format_amount(Decimal('100.50')), '100.5')
        self.assertEqual(format_amount(Decimal('0.05')), '0.05')
        self.assertEqual(format_amount(None), '0')
        self.assertEqual(format_amount(Decimal('-0.00')), '0')

    def test_aud_filter(self):
        self.assertEqual(aud(Decimal('1234.5')), '$1,234.50')
        self.assertEqual(aud(0), '$0.00')
        self.assertEqual(aud(None), '$0.00')
        self.assertEqual(aud('abc'), '$0.00')


class CsvExportTest(SimpleTestCase):
    """Test CSV serialization"""

    def test_quotes_fields_with_commas(self):
        rows = [{'date': '2024-01-02', 'clinic': 'Hemac', 'gross': 100, 'notes': 'a,b'}]

        lines = build_csv(rows).split('\n')

        self.assertEqual(lines[0], 'date,clinic,gross,notes')
        self.assertEqual(lines[1], '2024-01-02,Hemac,100,"a,b"')

    def test_doubles_internal_quotes_and_keeps_newlines_quoted(self):
        rows = [{'date': '2024-01-02', 'clinic': 'FNMC', 'gross': 5, 'notes': 'say "hi"\nlater'}]

        csv_text = build_csv(rows)

        self.assertEqual(csv_text, 'date,clinic,gross,notes\n2024-01-02,FNMC,5,"say ""hi""\nlater"')

    def test_empty_rows_produce_nothing(self):
        self.assertIsNone(build_csv([]))

    def test_export_rows_from_entries(self):
        entry = Billing(
            bill_date=date(2024, 1, 2),
            clinic=Clinic.HEMAC,
            gross_billing=Decimal('100.00'),
            notes=None
        )

        self.assertEqual(export_rows([entry]), [
            {'date': '2024-01-02', 'clinic': 'Hemac', 'gross': '100', 'notes': ''}
        ])

    def test_filename(self):
        self.assertEqual(
            export_filename('novabody', date(2024, 1, 1), date(2024, 1, 31)),
            'novabody-billing-2024-01-01_to_2024-01-31.csv'
        )


class BillingTrackerViewTest(TestCase):
    """Test the tracker page: form, filters, table and total"""

    def setUp(self):
        self.client = Client()

    def post_entry(self, filters=None, **overrides):
        data = {
            'bill_date': '2024-01-02',
            'clinic': 'Hemac',
            'gross_billing': '100',
            'notes': 'a,b',
        }
        data.update(overrides)
        return self.client.post(tracker_url(**(filters or JANUARY)), data)

    def test_page_loads(self):
        response = self.client.get(reverse('billing:tracker'))

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Add entry')
        self.assertContains(response, 'Dr Premila Hewage')
        self.assertFalse(response.context['is_editing'])

    def test_non_numeric_amount_is_rejected_without_write(self):
        """Invalid amount: no store call, submitted values kept"""
        with patch.object(BillingStore, 'insert') as insert:
            response = self.post_entry(gross_billing='abc', notes='keep me')

        insert.assert_not_called()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Billing.objects.count(), 0)
        self.assertContains(response, 'Enter a valid gross billing number')

        form = response.context['form']
        self.assertEqual(form.data['notes'], 'keep me')
        self.assertEqual(form.data['bill_date'], '2024-01-02')
        self.assertEqual(list(form.errors.keys()), ['gross_billing'])

    def test_amount_with_extra_decimals_is_not_rounded_into_store(self):
        response = self.post_entry(gross_billing='12.345')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Billing.objects.count(), 0)
        self.assertContains(response, 'Gross billing can have at most 2 decimal places.')

    def test_notes_are_stored_verbatim(self):
        self.post_entry(notes='  indented note  ')

        self.assertEqual(Billing.objects.get().notes, '  indented note  ')

    def test_malformed_editing_id_is_reported(self):
        """A bad hidden editing_id shows its error instead of failing silently"""
        with patch.object(BillingStore, 'update') as update:
            response = self.post_entry(editing_id='bogus')

        update.assert_not_called()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Billing.objects.count(), 0)
        self.assertContains(response, 'This entry can no longer be edited: Enter a valid UUID.')

    def test_insert_then_list_includes_entry(self):
        response = self.post_entry()

        self.assertRedirects(response, tracker_url(**JANUARY), fetch_redirect_response=False)

        entry = Billing.objects.get()
        self.assertEqual(entry.user_name, 'Dr Premila Hewage')

        response = self.client.get(tracker_url(**JANUARY))
        rows = response.context['rows']
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].bill_date, date(2024, 1, 2))
        self.assertEqual(rows[0].clinic, 'Hemac')
        self.assertEqual(rows[0].gross_billing, Decimal('100.00'))
        self.assertEqual(rows[0].notes, 'a,b')

    def test_insert_uses_configured_practitioner(self):
        SystemSetting.set_setting('practitioner_name', 'Dr Test Locum')

        self.post_entry()

        self.assertEqual(Billing.objects.get().user_name, 'Dr Test Locum')

    def test_form_resets_after_success(self):
        response = self.post_entry()
        response = self.client.get(response['Location'])

        form = response.context['form']
        self.assertFalse(form.is_bound)
        self.assertEqual(form.initial['gross_billing'], '')
        self.assertEqual(form.initial['clinic'], 'Hemac')

    def test_edit_mode_prefills_form(self):
        entry = make_entry(date(2024, 1, 5), '80.00', Clinic.FNMC, 'late')

        response = self.client.get(tracker_url(edit=str(entry.pk), **JANUARY))

        self.assertTrue(response.context['is_editing'])
        self.assertContains(response, 'Save changes')
        self.assertContains(response, 'Cancel edit')
        form = response.context['form']
        self.assertEqual(form.initial['editing_id'], entry.pk)
        self.assertEqual(form.initial['gross_billing'], '80.00')
        self.assertEqual(form.initial['clinic'], 'FNMC')

    def test_edit_unknown_entry_shows_error(self):
        response = self.client.get(tracker_url(edit='not-a-uuid'))

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Billing entry not found.')
        self.assertFalse(response.context['is_editing'])

    def test_update_then_list_shows_new_values(self):
        entry = make_entry(date(2024, 1, 5), '80.00', Clinic.FNMC, 'late')

        response = self.post_entry(
            editing_id=str(entry.pk),
            bill_date='2024-01-06',
            clinic='NovaBody',
            gross_billing='95.5',
            notes='corrected'
        )

        self.assertEqual(response.status_code, 302)
        self.assertEqual(Billing.objects.count(), 1)

        rows = self.client.get(tracker_url(**JANUARY)).context['rows']
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].pk, entry.pk)
        self.assertEqual(rows[0].bill_date, date(2024, 1, 6))
        self.assertEqual(rows[0].clinic, 'NovaBody')
        self.assertEqual(rows[0].gross_billing, Decimal('95.50'))
        self.assertEqual(rows[0].notes, 'corrected')

    def test_store_error_on_insert_is_surfaced(self):
        with patch.object(BillingStore, 'insert', side_effect=StoreError('permission denied for table billings')):
            response = self.post_entry(notes='kept')

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'permission denied for table billings')
        self.assertEqual(response.context['form'].data['notes'], 'kept')

    def test_total_matches_rows_shown(self):
        make_entry(date(2024, 1, 2), '100')
        make_entry(date(2024, 1, 3), '50')
        make_entry(date(2024, 1, 4), '25')

        response = self.client.get(tracker_url(**JANUARY))
        self.assertEqual(response.context['total'], Decimal('175'))
        self.assertContains(response, '$175.00')

        response = self.client.get(tracker_url(date_from='2024-01-01', date_to='2024-01-03', clinic='All'))
        self.assertEqual(response.context['total'], Decimal('150'))
        self.assertEqual(len(response.context['rows']), 2)

    def test_clinic_filter_narrows_rows(self):
        make_entry(date(2024, 1, 2), '100', Clinic.HEMAC)
        make_entry(date(2024, 1, 3), '50', Clinic.FNMC)
        make_entry(date(2024, 1, 4), '25', Clinic.HEMAC)

        all_rows = self.client.get(tracker_url(**JANUARY)).context['rows']
        hemac_rows = self.client.get(tracker_url(
            date_from='2024-01-01', date_to='2024-01-31', clinic='Hemac'
        )).context['rows']

        self.assertLessEqual(len(hemac_rows), len(all_rows))
        self.assertEqual(len(hemac_rows), 2)
        self.assertTrue(all(row.clinic == 'Hemac' for row in hemac_rows))

    def test_list_error_empties_rows(self):
        make_entry(date(2024, 1, 2), '100')

        with patch.object(BillingStore, 'select', side_effect=StoreError('relation "billings" does not exist')):
            response = self.client.get(tracker_url(**JANUARY))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['rows'], [])
        self.assertEqual(response.context['total'], Decimal('0'))
        self.assertContains(response, 'relation &quot;billings&quot; does not exist')


class BillingDeleteViewTest(TestCase):
    """Test delete confirmation and deletion"""

    def setUp(self):
        self.client = Client()
        self.entry = make_entry(date(2024, 1, 2), '100', notes='to remove')
        self.url = f"{reverse('billing:entry_delete', args=[self.entry.pk])}?{urlencode(JANUARY)}"

    def test_confirmation_page(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Delete this entry?')
        self.assertTrue(Billing.objects.filter(pk=self.entry.pk).exists())

    def test_delete_removes_entry_from_list(self):
        rows = self.client.get(tracker_url(**JANUARY)).context['rows']
        self.assertEqual(len(rows), 1)

        response = self.client.post(self.url)

        self.assertRedirects(response, tracker_url(**JANUARY), fetch_redirect_response=False)
        rows = self.client.get(tracker_url(**JANUARY)).context['rows']
        self.assertEqual(rows, [])

    def test_store_error_leaves_row(self):
        with patch.object(BillingStore, 'delete', side_effect=StoreError('network error')):
            response = self.client.post(self.url, follow=True)

        self.assertContains(response, 'network error')
        self.assertTrue(Billing.objects.filter(pk=self.entry.pk).exists())
        self.assertEqual(len(response.context['rows']), 1)

    def test_confirmation_for_missing_entry_redirects(self):
        self.entry.delete()

        response = self.client.get(self.url, follow=True)

        self.assertContains(response, 'Billing entry not found.')


class BillingEntriesApiTest(TestCase):
    """Test the JSON list endpoint used for live filtering"""

    def setUp(self):
        self.client = Client()
        make_entry(date(2024, 1, 2), '100', Clinic.HEMAC, 'a')
        make_entry(date(2024, 1, 3), '50', Clinic.FNMC)

    def test_echoes_seq_and_returns_rows(self):
        response = self.client.get(reverse('billing:entries_api'), {'seq': '7', **JANUARY})
        payload = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(payload['seq'], 7)
        self.assertEqual(payload['total'], '150.00')
        self.assertEqual(payload['error'], '')
        self.assertEqual([row['bill_date'] for row in payload['rows']], ['2024-01-02', '2024-01-03'])
        self.assertEqual(payload['filters'], JANUARY)

    def test_clinic_filter(self):
        response = self.client.get(reverse('billing:entries_api'), {
            'seq': '2', 'date_from': '2024-01-01', 'date_to': '2024-01-31', 'clinic': 'FNMC'
        })
        payload = response.json()

        self.assertEqual(len(payload['rows']), 1)
        self.assertEqual(payload['rows'][0]['clinic'], 'FNMC')

    def test_store_error(self):
        with patch.object(BillingStore, 'select', side_effect=StoreError('timeout')):
            response = self.client.get(reverse('billing:entries_api'), {'seq': '3', **JANUARY})

        payload = response.json()
        self.assertEqual(response.status_code, 502)
        self.assertEqual(payload['seq'], 3)
        self.assertEqual(payload['rows'], [])
        self.assertEqual(payload['error'], 'timeout')


class BillingExportViewTest(TestCase):
    """Test CSV and PDF downloads of the filtered rows"""

    def setUp(self):
        self.client = Client()

    def test_csv_download(self):
        make_entry(date(2024, 1, 2), '100', Clinic.HEMAC, 'a,b')
        make_entry(date(2024, 2, 2), '999', Clinic.HEMAC)

        response = self.client.get(reverse('billing:export_csv'), JANUARY)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        self.assertEqual(
            response['Content-Disposition'],
            'attachment; filename="novabody-billing-2024-01-01_to_2024-01-31.csv"'
        )
        lines = response.content.decode('utf-8').split('\n')
        self.assertEqual(lines, ['date,clinic,gross,notes', '2024-01-02,Hemac,100,"a,b"'])

    def test_csv_with_no_rows_generates_nothing(self):
        response = self.client.get(reverse('billing:export_csv'), JANUARY)

        self.assertEqual(response.status_code, 302)
        self.assertNotIn('Content-Disposition', response)

    def test_csv_filename_uses_export_prefix(self):
        SystemSetting.set_setting('export_prefix', 'clinic')
        make_entry(date(2024, 1, 2), '100')

        response = self.client.get(reverse('billing:export_csv'), JANUARY)

        self.assertIn('clinic-billing-2024-01-01_to_2024-01-31.csv', response['Content-Disposition'])

    def test_pdf_download(self):
        make_entry(date(2024, 1, 2), '100', Clinic.HEMAC, 'a,b')

        response = self.client.get(reverse('billing:export_pdf'), JANUARY)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_pdf_with_no_rows_generates_nothing(self):
        response = self.client.get(reverse('billing:export_pdf'), JANUARY)

        self.assertEqual(response.status_code, 302)
