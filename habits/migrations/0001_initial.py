from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import habits.models
import simple_history.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Habit',
            fields=[
                ('habit_id', models.CharField(default=habits.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('target_hours_per_day', models.FloatField(default=1.0)),
                ('color_tag', models.CharField(choices=[('green', 'Green'), ('cyan', 'Cyan'), ('red', 'Red'), ('yellow', 'Yellow'), ('purple', 'Purple')], default='green', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='habits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'habits',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='UserPreferences',
            fields=[
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='habit_preferences', serialize=False, to=settings.AUTH_USER_MODEL)),
                ('timezone', models.CharField(default='UTC', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'user_preferences',
            },
        ),
        migrations.CreateModel(
            name='HistoricalHabit',
            fields=[
                ('habit_id', models.CharField(db_index=True, default=habits.models.generate_id, editable=False, max_length=36)),
                ('name', models.CharField(max_length=100)),
                ('target_hours_per_day', models.FloatField(default=1.0)),
                ('color_tag', models.CharField(choices=[('green', 'Green'), ('cyan', 'Cyan'), ('red', 'Red'), ('yellow', 'Yellow'), ('purple', 'Purple')], default='green', max_length=10)),
                ('created_at', models.DateTimeField(blank=True, editable=False)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'historical habit',
                'verbose_name_plural': 'historical habits',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name='WeekLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('week_id', models.CharField(db_index=True, max_length=8)),
                ('daily', models.JSONField(default=habits.models.empty_daily)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('habit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='week_logs', to='habits.habit')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='week_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'week_logs',
                'unique_together': {('habit', 'week_id')},
            },
        ),
        migrations.AddIndex(
            model_name='habit',
            index=models.Index(fields=['user', 'created_at'], name='habits_user_id_7c9f0e_idx'),
        ),
        migrations.AddIndex(
            model_name='weeklog',
            index=models.Index(fields=['user', 'week_id'], name='week_logs_user_id_3a1b2c_idx'),
        ),
        migrations.AddIndex(
            model_name='weeklog',
            index=models.Index(fields=['user', 'updated_at'], name='week_logs_user_id_8d4e5f_idx'),
        ),
    ]
