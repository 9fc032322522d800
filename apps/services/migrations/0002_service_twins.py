from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('services', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='service',
            name='allows_twins',
            field=models.BooleanField(default=False),
        ),
        migrations.AddField(
            model_name='service',
            name='twin_duration_minutes',
            field=models.PositiveIntegerField(blank=True, help_text='Twin appointment duration in minutes (defaults to twice the duration)', null=True),
        ),
    ]
