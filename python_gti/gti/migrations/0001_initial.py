# Generated migration for the GTI pipeline models

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('leads', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InboundCallRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('primary_phone', models.CharField(max_length=20, unique=True)),
                ('call_uuid', models.CharField(db_index=True, max_length=128)),
                ('received_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('last_sent_at', models.DateTimeField(blank=True, null=True)),
                ('send_count', models.PositiveIntegerField(default=0)),
                ('consumed', models.BooleanField(default=False)),
            ],
            options={
                'ordering': ['-received_at'],
            },
        ),
        migrations.CreateModel(
            name='PostbackLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('call_uuid', models.CharField(blank=True, max_length=128, null=True)),
                ('primary_phone', models.CharField(blank=True, max_length=20, null=True)),
                ('event_type', models.CharField(choices=[('dispose', 'Dispose'), ('progress', 'Progress')], max_length=20)),
                ('payload', models.JSONField()),
                ('response_status', models.PositiveIntegerField(blank=True, null=True)),
                ('response_body', models.JSONField(blank=True, null=True)),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('trigger', models.CharField(blank=True, default='', max_length=255)),
                ('error', models.BooleanField(default=False)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('attempt', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('lead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='postback_logs', to='leads.lead')),
            ],
            options={
                'ordering': ['-sent_at'],
                'indexes': [
                    models.Index(fields=['lead', 'sent_at'], name='gti_postback_lead_sent_idx'),
                    models.Index(fields=['event_type', 'sent_at'], name='gti_postback_type_sent_idx'),
                    models.Index(fields=['error', 'sent_at'], name='gti_postback_error_sent_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='GtiEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('idempotency_key', models.CharField(max_length=128, unique=True)),
                ('organization_name_snapshot', models.CharField(db_index=True, max_length=255)),
                ('event_type', models.CharField(max_length=50)),
                ('event_timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('payload', models.JSONField(default=dict)),
                ('push_status', models.CharField(choices=[('pending', 'Pending'), ('sent', 'Sent'), ('confirmed', 'Confirmed'), ('skipped', 'Skipped')], db_index=True, default='pending', max_length=20)),
                ('next_attempt_after', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('lead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='gti_events', to='leads.lead')),
            ],
            options={
                'ordering': ['event_timestamp', 'id'],
                'indexes': [
                    models.Index(fields=['organization_name_snapshot', 'event_timestamp'], name='gti_event_org_ts_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='GtiWebhookConfirmation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('idempotency_key', models.CharField(db_index=True, max_length=128)),
                ('payload', models.JSONField(default=dict)),
                ('headers', models.JSONField(default=dict)),
                ('integration_key_hash', models.CharField(blank=True, default='', max_length=64)),
                ('note', models.CharField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='IntegrationLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('route', models.CharField(max_length=255)),
                ('method', models.CharField(max_length=10)),
                ('status_code', models.PositiveIntegerField()),
                ('ip', models.CharField(blank=True, default='', max_length=64)),
                ('user_agent', models.CharField(blank=True, default='', max_length=512)),
                ('headers', models.JSONField(default=dict)),
                ('query', models.JSONField(default=dict)),
                ('body', models.JSONField(blank=True, null=True)),
                ('success', models.BooleanField(default=False)),
                ('message', models.CharField(blank=True, default='', max_length=500)),
                ('details', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
