# Generated migration for the Lead model

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, default='', max_length=255)),
                ('phone', models.CharField(blank=True, db_index=True, default='', max_length=32)),
                ('alternate_phone', models.CharField(blank=True, db_index=True, default='', max_length=32)),
                ('credit_score', models.IntegerField(blank=True, null=True)),
                ('total_debt_amount', models.FloatField(blank=True, null=True)),
                ('requested_loan_amount', models.FloatField(blank=True, null=True)),
                ('disposition1', models.CharField(blank=True, default='', max_length=100)),
                ('lead_progress_status', models.CharField(blank=True, default='', max_length=100)),
                ('gti_primary_phone', models.CharField(blank=True, max_length=20, null=True)),
                ('gti_call_uuid', models.CharField(blank=True, max_length=128, null=True)),
                ('gti_last_postback', models.DateTimeField(blank=True, null=True)),
                ('gti_postback_history', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
