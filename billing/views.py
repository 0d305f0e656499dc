# billing/views.py
import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.template.loader import render_to_string
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_http_methods
from django.views.generic import TemplateView, View

from xhtml2pdf import pisa

from core.models import SystemSetting
from .csv_export import build_csv, export_filename, export_rows
from .forms import BillingEntryForm, ReportFilterForm
from .report import compute_total
from .store import BillingStore, StoreError

logger = logging.getLogger(__name__)


def tracker_url(filter_form):
    """Tracker URL carrying the active report filters"""
    return f"{reverse('billing:tracker')}?{urlencode(filter_form.as_query())}"


def load_report(store, filter_form):
    """
    Run the range query for the given filters

    Returns:
        Tuple of (rows, error_message); rows is empty whenever the store fails
    """
    date_from, date_to = filter_form.date_range
    try:
        return store.select(date_from, date_to, filter_form.clinic_filter), ''
    except StoreError as e:
        return [], e.message


class BillingTrackerView(TemplateView):
    """
    Single page: entry form, report filters, filtered table with total

    GET renders the page (``?edit=<id>`` puts the form in edit mode),
    POST creates or updates an entry and redirects back with the same filters.
    """
    template_name = 'billing/tracker.html'
    store_class = BillingStore

    def dispatch(self, request, *args, **kwargs):
        self.store = self.store_class()
        self.filter_form = ReportFilterForm.from_query(request.GET)
        return super().dispatch(request, *args, **kwargs)

    def get(self, request, *args, **kwargs):
        form = BillingEntryForm()

        edit_id = request.GET.get('edit')
        if edit_id:
            try:
                form = BillingEntryForm.for_entry(self.store.get(edit_id))
            except StoreError as e:
                messages.error(request, e.message)

        return self.render_to_response(self.get_context_data(form=form))

    def post(self, request, *args, **kwargs):
        form = BillingEntryForm(request.POST)

        if not form.is_valid():
            # Nothing is written; the form comes back with the submitted values
            return self.render_to_response(self.get_context_data(form=form))

        data = form.cleaned_data
        try:
            if data['editing_id']:
                self.store.update(
                    data['editing_id'],
                    bill_date=data['bill_date'],
                    clinic=data['clinic'],
                    gross_billing=data['gross_billing'],
                    notes=data['notes']
                )
                messages.success(request, 'Entry updated.')
            else:
                self.store.insert(
                    user_name=SystemSetting.get_practice_setting('practitioner_name'),
                    bill_date=data['bill_date'],
                    clinic=data['clinic'],
                    gross_billing=data['gross_billing'],
                    notes=data['notes']
                )
                messages.success(request, 'Entry added.')
        except StoreError as e:
            messages.error(request, e.message)
            return self.render_to_response(self.get_context_data(form=form))

        return redirect(tracker_url(self.filter_form))

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)

        rows, list_error = load_report(self.store, self.filter_form)
        filter_query = urlencode(self.filter_form.as_query())

        context.update({
            'filter_form': self.filter_form,
            'filter_query': filter_query,
            'rows': rows,
            'total': compute_total(rows),
            'list_error': list_error,
            'is_editing': context['form'].is_editing,
        })
        return context


class BillingDeleteView(View):
    """Confirmation page on GET, delete on POST"""
    template_name = 'billing/confirm_delete.html'
    store_class = BillingStore

    def dispatch(self, request, *args, **kwargs):
        self.store = self.store_class()
        self.filter_form = ReportFilterForm.from_query(request.GET)
        return super().dispatch(request, *args, **kwargs)

    def get(self, request, pk):
        try:
            entry = self.store.get(pk)
        except StoreError as e:
            messages.error(request, e.message)
            return redirect(tracker_url(self.filter_form))

        return render(request, self.template_name, {
            'entry': entry,
            'filter_query': urlencode(self.filter_form.as_query()),
        })

    def post(self, request, pk):
        try:
            self.store.delete(pk)
        except StoreError as e:
            messages.error(request, e.message)
        else:
            messages.success(request, 'Entry deleted.')

        return redirect(tracker_url(self.filter_form))


@require_http_methods(["GET"])
def billing_entries_api(request):
    """
    JSON list for the report filters

    The caller's ``seq`` is echoed back unchanged so the page can drop
    responses that arrive after a newer query was issued.
    """
    try:
        seq = int(request.GET.get('seq', ''))
    except ValueError:
        seq = None

    filter_form = ReportFilterForm.from_query(request.GET)
    rows, error = load_report(BillingStore(), filter_form)

    return JsonResponse({
        'seq': seq,
        'rows': [
            {
                'id': str(row.pk),
                'bill_date': row.bill_date.isoformat(),
                'clinic': row.clinic,
                'gross_billing': str(row.gross_billing),
                'notes': row.notes or '',
            }
            for row in rows
        ],
        'total': str(compute_total(rows)),
        'error': error,
        'filters': filter_form.as_query(),
    }, status=502 if error else 200)


def _export_rows_or_redirect(request, filter_form):
    """Filtered rows for export, or a redirect response when there is nothing to export"""
    rows, error = load_report(BillingStore(), filter_form)

    if error:
        messages.error(request, error)
        return None, redirect(tracker_url(filter_form))

    if not rows:
        messages.info(request, 'There are no entries to export for this range.')
        return None, redirect(tracker_url(filter_form))

    return rows, None


@require_http_methods(["GET"])
def export_billing_csv(request):
    """Download the filtered rows as CSV"""
    filter_form = ReportFilterForm.from_query(request.GET)
    rows, response = _export_rows_or_redirect(request, filter_form)
    if response is not None:
        return response

    date_from, date_to = filter_form.date_range
    filename = export_filename(SystemSetting.get_practice_setting('export_prefix'), date_from, date_to)

    response = HttpResponse(build_csv(export_rows(rows)), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    logger.info(f"Exported {len(rows)} billing entries to {filename}")
    return response


@require_http_methods(["GET"])
def export_billing_pdf(request):
    """Download the filtered rows and total as PDF"""
    filter_form = ReportFilterForm.from_query(request.GET)
    rows, response = _export_rows_or_redirect(request, filter_form)
    if response is not None:
        return response

    date_from, date_to = filter_form.date_range
    filename = export_filename(SystemSetting.get_practice_setting('export_prefix'), date_from, date_to, 'pdf')

    context = {
        'rows': rows,
        'total': compute_total(rows),
        'date_from': date_from,
        'date_to': date_to,
        'clinic': filter_form.initial['clinic'],
        'generated_at': timezone.localtime(timezone.now()),
        'practice_name': SystemSetting.get_practice_setting('practice_name'),
        'practitioner_name': SystemSetting.get_practice_setting('practitioner_name'),
    }

    html_string = render_to_string('billing/report_pdf.html', context)

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    pisa_status = pisa.CreatePDF(html_string, dest=response)

    if pisa_status.err:
        logger.error(f"PDF generation failed for {filename}: {pisa_status.err} error(s)")
        messages.error(request, 'Error generating PDF. Please try again.')
        return redirect(tracker_url(filter_form))

    logger.info(f"Exported {len(rows)} billing entries to {filename}")
    return response
