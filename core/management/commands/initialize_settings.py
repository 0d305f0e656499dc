from django.core.management.base import BaseCommand
from core.models import SystemSetting


class Command(BaseCommand):
    help = 'Initialize default practice settings'

    def handle(self, *args, **options):
        created_keys, existing_keys = SystemSetting.initialize_practice_settings()
        
        for key in created_keys:
            self.stdout.write(self.style.SUCCESS(f'✓ Created setting: {key}'))
        
        # Only show this in verbose mode to keep logs clean
        if options.get('verbosity', 1) >= 2:
            for key in existing_keys:
                self.stdout.write(self.style.WARNING(f'⚠ Already exists: {key}'))
        
        # Summary message
        if created_keys:
            self.stdout.write(self.style.SUCCESS(
                f'\n✓ Settings initialization complete: {len(created_keys)} created, {len(existing_keys)} already existed'
            ))
        else:
            self.stdout.write(self.style.SUCCESS(
                f'✓ All settings already initialized ({len(existing_keys)} settings)'
            ))
