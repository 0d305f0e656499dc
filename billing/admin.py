# billing/admin.py
from django.contrib import admin
from .models import Billing


@admin.register(Billing)
class BillingAdmin(admin.ModelAdmin):
    list_display = ['bill_date', 'clinic', 'gross_billing', 'user_name', 'notes', 'updated_at']
    list_filter = ['clinic', 'bill_date']
    search_fields = ['notes', 'user_name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    date_hierarchy = 'bill_date'
    
    fieldsets = (
        ('Billing', {
            'fields': ('bill_date', 'clinic', 'gross_billing', 'notes')
        }),
        ('Recorded By', {
            'fields': ('user_name',)
        }),
        ('Timestamps', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ['collapse']
        }),
    )
