# core/models.py
from django.db import models


# Defaults used whenever a setting row is missing or inactive
DEFAULT_PRACTICE_SETTINGS = {
    'practice_name': ('NovaBody', 'Displayed in the header, footer and PDF reports'),
    'practice_tagline': ('Daily Billing', 'Short title shown next to the practice name'),
    'practitioner_name': ('Dr Premila Hewage', 'Recorded as user_name on every new billing entry'),
    'export_prefix': ('novabody', 'Prefix used in exported report filenames'),
}


class SystemSetting(models.Model):
    """Simplified system settings - just key-value pairs"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'System Setting'
        verbose_name_plural = 'System Settings'
        ordering = ['key']

    def __str__(self):
        return f"{self.key}: {self.value}"

    @classmethod
    def get_setting(cls, key, default=None):
        """Get a setting value by key"""
        try:
            setting = cls.objects.get(key=key, is_active=True)
            return setting.value
        except cls.DoesNotExist:
            return default

    @classmethod
    def get_practice_setting(cls, key):
        """Get one of the practice settings, falling back to its built-in default"""
        default, _ = DEFAULT_PRACTICE_SETTINGS[key]
        return cls.get_setting(key, default)

    @classmethod
    def set_setting(cls, key, value, description=''):
        """Set or update a setting"""
        setting, created = cls.objects.get_or_create(
            key=key,
            defaults={
                'value': str(value),
                'description': description,
                'is_active': True
            }
        )
        if not created:
            setting.value = str(value)
            setting.description = description
            setting.is_active = True
            setting.save()
        return setting

    @classmethod
    def initialize_practice_settings(cls):
        """
        Create any missing practice settings with their defaults.

        Returns:
            Tuple of (created_keys, existing_keys)
        """
        created_keys = []
        existing_keys = []

        for key, (value, description) in DEFAULT_PRACTICE_SETTINGS.items():
            _, created = cls.objects.get_or_create(
                key=key,
                defaults={
                    'value': value,
                    'description': description,
                    'is_active': True
                }
            )
            if created:
                created_keys.append(key)
            else:
                existing_keys.append(key)

        return created_keys, existing_keys
