# billing/urls.py
from django.urls import path
from . import views

app_name = 'billing'

urlpatterns = [
    path('', views.BillingTrackerView.as_view(), name='tracker'),
    path('entries/<uuid:pk>/delete/', views.BillingDeleteView.as_view(), name='entry_delete'),
    path('entries/api/', views.billing_entries_api, name='entries_api'),
    path('export/csv/', views.export_billing_csv, name='export_csv'),
    path('export/pdf/', views.export_billing_pdf, name='export_pdf'),
]
