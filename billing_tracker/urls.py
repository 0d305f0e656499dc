# billing_tracker/urls.py
from django.contrib import admin
from django.urls import path, include

from core.health_check import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health_check'),
    path('', include('billing.urls', namespace='billing')),
]
