import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('services', '0002_service_twins'),
        ('staff', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='staffmember',
            name='twin_services',
            field=models.ManyToManyField(blank=True, help_text='Services this staff member may perform as a twin appointment', related_name='twin_qualified_staff', to='services.service'),
        ),
        migrations.CreateModel(
            name='StaffRecurringBreak',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('day_of_week', models.PositiveSmallIntegerField(blank=True, choices=[(0, 'Monday'), (1, 'Tuesday'), (2, 'Wednesday'), (3, 'Thursday'), (4, 'Friday'), (5, 'Saturday'), (6, 'Sunday')], null=True, validators=[django.core.validators.MaxValueValidator(6)])),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recurring_breaks', to='staff.staffmember')),
            ],
            options={
                'verbose_name': 'Recurring Break',
                'verbose_name_plural': 'Recurring Breaks',
                'ordering': ['staff', 'day_of_week', 'start_time'],
            },
        ),
    ]
