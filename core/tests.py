# core/tests.py
"""
Unit tests for practice settings and shared helpers
"""
from datetime import date
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, Client
from django.urls import reverse

from .models import SystemSetting, DEFAULT_PRACTICE_SETTINGS
from .utils import get_month_start, parse_iso_date


class SystemSettingModelTest(TestCase):
    """Test SystemSetting getters"""

    def test_practice_setting_defaults(self):
        self.assertEqual(SystemSetting.get_practice_setting('practitioner_name'), 'Dr Premila Hewage')
        self.assertEqual(SystemSetting.get_practice_setting('export_prefix'), 'novabody')

    def test_practice_setting_override(self):
        SystemSetting.set_setting('practice_name', 'NovaBody Medical')

        self.assertEqual(SystemSetting.get_practice_setting('practice_name'), 'NovaBody Medical')

    def test_inactive_setting_uses_default(self):
        setting = SystemSetting.set_setting('export_prefix', 'custom')
        setting.is_active = False
        setting.save()

        self.assertEqual(SystemSetting.get_practice_setting('export_prefix'), 'novabody')


class InitializeSettingsCommandTest(TestCase):
    """Test the initialize_settings management command"""

    def test_creates_missing_settings_once(self):
        out = StringIO()
        call_command('initialize_settings', stdout=out)

        self.assertEqual(SystemSetting.objects.count(), len(DEFAULT_PRACTICE_SETTINGS))
        self.assertIn('Settings initialization complete', out.getvalue())

        out = StringIO()
        call_command('initialize_settings', stdout=out)

        self.assertEqual(SystemSetting.objects.count(), len(DEFAULT_PRACTICE_SETTINGS))
        self.assertIn('All settings already initialized', out.getvalue())

    def test_keeps_existing_values(self):
        SystemSetting.set_setting('practice_name', 'Custom Practice')

        call_command('initialize_settings', stdout=StringIO())

        self.assertEqual(SystemSetting.get_setting('practice_name'), 'Custom Practice')


class PracticeContextTest(TestCase):
    """Test practice settings reach the templates"""

    def test_practice_name_in_header(self):
        SystemSetting.set_setting('practice_name', 'Balwyn Physio')

        response = Client().get(reverse('billing:tracker'))

        self.assertContains(response, 'Balwyn Physio')
        self.assertEqual(response.context['PRACTICE_NAME'], 'Balwyn Physio')


class HealthCheckTest(TestCase):
    """Test the uptime endpoint"""

    def test_health_check(self):
        response = Client().get(reverse('health_check'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')

    def test_health_check_rejects_post(self):
        response = Client().post(reverse('health_check'))

        self.assertEqual(response.status_code, 405)


class DateUtilsTest(SimpleTestCase):
    """Test date helpers"""

    def test_parse_iso_date(self):
        self.assertEqual(parse_iso_date('2024-01-02'), date(2024, 1, 2))
        self.assertIsNone(parse_iso_date('02/01/2024'))
        self.assertEqual(parse_iso_date('', date(2024, 1, 1)), date(2024, 1, 1))

    def test_get_month_start(self):
        self.assertEqual(get_month_start(date(2024, 2, 29)), date(2024, 2, 1))
