import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CardSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.UUIDField()),
                ("card_id", models.UUIDField(unique=True)),
                ("ease_factor", models.FloatField(default=2.5)),
                ("interval_days", models.PositiveIntegerField(default=1)),
                ("repetitions", models.PositiveIntegerField(default=0)),
                ("box_number", models.PositiveSmallIntegerField(default=1)),
                ("next_due_at", models.DateTimeField()),
                ("last_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["user_id", "next_due_at"], name="card_schedule_user_due_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("ease_factor__gte", 1.3)),
                        name="card_schedule_ease_floor",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("interval_days__gte", 1)),
                        name="card_schedule_interval_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewHistoryEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.UUIDField()),
                ("card_id", models.UUIDField()),
                ("quality", models.SmallIntegerField()),
                ("was_correct", models.BooleanField()),
                ("ease_factor_before", models.FloatField()),
                ("ease_factor_after", models.FloatField()),
                ("interval_before", models.PositiveIntegerField()),
                ("interval_after", models.PositiveIntegerField()),
                ("box_before", models.PositiveSmallIntegerField()),
                ("box_after", models.PositiveSmallIntegerField()),
                ("response_time_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("reviewed_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["user_id", "reviewed_at"], name="review_history_user_time_idx"),
                    models.Index(fields=["card_id", "reviewed_at"], name="review_history_card_time_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DailyAggregate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.UUIDField()),
                ("date", models.DateField()),
                ("cards_reviewed", models.PositiveIntegerField(default=0)),
                ("cards_learned", models.PositiveIntegerField(default=0)),
                ("correct_answers", models.PositiveIntegerField(default=0)),
                ("total_answers", models.PositiveIntegerField(default=0)),
                ("study_time_minutes", models.PositiveIntegerField(default=0)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("user_id", "date"), name="daily_aggregate_user_day"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StudyStreak",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.UUIDField(unique=True)),
                ("current_streak", models.PositiveIntegerField(default=0)),
                ("longest_streak", models.PositiveIntegerField(default=0)),
                ("last_study_date", models.DateField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("longest_streak__gte", models.F("current_streak"))),
                        name="study_streak_longest_covers_current",
                    ),
                ],
            },
        ),
    ]
