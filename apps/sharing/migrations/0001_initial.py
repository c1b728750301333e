# Generated manually for shares, location members and invite codes

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


ROLE_CHOICES = [('viewer', 'Viewer'), ('editor', 'Editor'), ('admin', 'Admin')]
RESOURCE_CHOICES = [('location', 'Location'), ('list', 'List')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('wishlists', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Share',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('resource_type', models.CharField(choices=RESOURCE_CHOICES, max_length=20)),
                ('resource_id', models.UUIDField()),
                ('role', models.CharField(choices=ROLE_CHOICES, default='viewer', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('shared_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shares_given', to=settings.AUTH_USER_MODEL)),
                ('shared_with', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shares_received', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'shares',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['resource_type', 'resource_id'], name='shares_resource_idx'),
                    models.Index(fields=['shared_with', 'resource_type'], name='shares_grantee_idx'),
                    models.Index(fields=['expires_at'], name='shares_expires_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('resource_type', 'resource_id', 'shared_with'), name='shares_one_per_grantee'),
                    models.CheckConstraint(condition=models.Q(('shared_by', models.F('shared_with')), _negated=True), name='shares_no_self_share'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LocationMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=ROLE_CHOICES, default='viewer', max_length=20)),
                ('added_at', models.DateTimeField(auto_now_add=True)),
                ('added_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='location_members_added', to=settings.AUTH_USER_MODEL)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='wishlists.location')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='location_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'location_members',
                'ordering': ['added_at'],
                'indexes': [models.Index(fields=['user'], name='location_members_user_idx')],
                'unique_together': {('location', 'user')},
            },
        ),
        migrations.CreateModel(
            name='InviteCode',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code', models.CharField(db_index=True, editable=False, max_length=16, unique=True)),
                ('resource_type', models.CharField(choices=RESOURCE_CHOICES, max_length=20)),
                ('resource_id', models.UUIDField()),
                ('default_role', models.CharField(choices=ROLE_CHOICES, default='viewer', max_length=20)),
                ('max_uses', models.PositiveIntegerField(default=1)),
                ('use_count', models.PositiveIntegerField(default=0)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invite_codes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'invite_codes',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['resource_type', 'resource_id'], name='invite_codes_resource_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('max_uses__gte', 1)), name='invite_codes_min_uses'),
                    models.CheckConstraint(condition=models.Q(('use_count__lte', models.F('max_uses'))), name='invite_codes_use_limit'),
                ],
            },
        ),
    ]
