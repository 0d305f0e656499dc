# Generated migration file
from decimal import Decimal
import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Billing',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_name', models.CharField(max_length=200)),
                ('bill_date', models.DateField()),
                ('clinic', models.CharField(choices=[('Hemac', 'Hemac'), ('MM Balwyn', 'MM Balwyn'), ('FNMC', 'FNMC'), ('NovaBody', 'NovaBody')], max_length=20)),
                ('gross_billing', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Billing Entry',
                'verbose_name_plural': 'Billing Entries',
                'db_table': 'billings',
                'ordering': ['bill_date', 'created_at'],
                'indexes': [
                    models.Index(fields=['bill_date'], name='billings_bill_date_idx'),
                    models.Index(fields=['clinic', 'bill_date'], name='billings_clinic_date_idx'),
                ],
            },
        ),
    ]
