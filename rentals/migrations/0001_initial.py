import uuid
from decimal import Decimal

import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(error_messages={'unique': 'A user with that email already exists.'}, help_text='Required. Enter a valid email address.', max_length=254, unique=True, verbose_name='email address')),
                ('role', models.CharField(choices=[('RENTER', 'Renter'), ('OWNER', 'Owner')], default='RENTER', help_text='Whether the account mainly rents or lists equipment.', max_length=10, verbose_name='role')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['role'], name='user_role_idx')],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200, verbose_name='title')),
                ('price_per_day', models.DecimalField(decimal_places=2, help_text='Daily rental rate', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='price per day')),
                ('available', models.BooleanField(default=True, help_text='Whether the listing accepts new reservations', verbose_name='available')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('owner', models.ForeignKey(help_text='User who lists the item', on_delete=django.db.models.deletion.CASCADE, related_name='items', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'item',
                'verbose_name_plural': 'items',
                'ordering': ['-created_at'],
                'constraints': [models.CheckConstraint(condition=models.Q(('price_per_day__gt', 0)), name='item_price_per_day_positive')],
            },
        ),
        migrations.CreateModel(
            name='RentalTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('start_date', models.DateField(verbose_name='start date')),
                ('end_date', models.DateField(verbose_name='end date')),
                ('total_price', models.DecimalField(decimal_places=2, help_text='Grand total locked in when the rental was created', max_digits=10, verbose_name='total price')),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('PENDING_PAYMENT', 'Pending payment'), ('IN_REVIEW', 'In review'), ('CONFIRMED', 'Confirmed'), ('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='PENDING_PAYMENT', help_text='Current lifecycle status', max_length=20, verbose_name='status')),
                ('payment_token', models.CharField(blank=True, help_text='Opaque payment confirmation token', max_length=255, null=True, verbose_name='payment token')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('item', models.ForeignKey(help_text='Item being rented', on_delete=django.db.models.deletion.PROTECT, related_name='rentals', to='rentals.item')),
                ('owner', models.ForeignKey(help_text='Owner of the item when the rental was created', on_delete=django.db.models.deletion.PROTECT, related_name='rentals_as_owner', to=settings.AUTH_USER_MODEL)),
                ('renter', models.ForeignKey(help_text='User renting the item', on_delete=django.db.models.deletion.PROTECT, related_name='rentals_as_renter', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'rental transaction',
                'verbose_name_plural': 'rental transactions',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['item', 'status'], name='rental_item_status_idx'),
                    models.Index(fields=['renter', 'status'], name='rental_renter_status_idx'),
                    models.Index(fields=['owner', 'status'], name='rental_owner_status_idx'),
                    models.Index(fields=['start_date', 'end_date'], name='rental_window_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('start_date__lte', models.F('end_date'))), name='rental_start_not_after_end'),
                    models.CheckConstraint(condition=models.Q(('total_price__gt', 0)), name='rental_total_price_positive'),
                ],
            },
        ),
    ]
