"""Tests for the daily reminder dispatch and its scheduler."""

from __future__ import annotations

from datetime import date

from habitloop.models import NotificationType
from habitloop.scheduler import REMINDER_JOB_ID, ReminderScheduler
from habitloop.services.reminders import dispatch_due_reminders, upcoming_occurrences

TODAY = date(2024, 1, 15)


def test_dispatch_names_the_upcoming_occurrence(
    habit_factory, habit_repo, notifier, notification_repo, user
):
    # Occurrences on the 15th-17th with a one-day reminder land on the 15th and 16th.
    habit = habit_factory(name="Stretch", repeat="daily", repeat_count=3, reminder_offsets=[1])
    habit_factory(name="No reminders", repeat="daily", repeat_count=3)

    sent = dispatch_due_reminders(habit_repo, notifier, today=date(2024, 1, 16))

    assert sent == 1
    [notification] = notification_repo.list_for_recipient(user.id)
    assert notification.type == NotificationType.HABIT_REMINDER.value
    assert notification.related_habit_id == habit.id
    assert notification.payload["date"] == "2024-01-17"
    assert notification.payload["reminder_date"] == "2024-01-16"
    assert notification.message == 'Don\'t forget "Stretch" on 2024-01-17!'


def test_weekly_reminder_points_days_ahead(
    habit_factory, habit_repo, notifier, notification_repo, user
):
    # Mondays the 15th and 22nd; two days ahead puts the live reminder on Saturday the 20th.
    habit_factory(
        repeat="weekly", repeat_days=["Monday"], repeat_count=2, reminder_offsets=[2]
    )

    assert dispatch_due_reminders(habit_repo, notifier, today=date(2024, 1, 20)) == 1

    [notification] = notification_repo.list_for_recipient(user.id)
    assert notification.payload["occurrence_dates"] == ["2024-01-22"]
    assert "2024-01-22" in notification.message


def test_dispatch_ignores_completion_on_reminder_day(
    habit_factory, habit_service, habit_repo, notifier, user
):
    habit = habit_factory(repeat="daily", repeat_count=3, reminder_offsets=[1])
    habit_service.track_completion(habit.id, user.id, TODAY, today=TODAY)

    # The reminder on the 15th announces the 16th, which is still open.
    assert dispatch_due_reminders(habit_repo, notifier, today=TODAY) == 1


def test_dispatch_skips_occurrences_already_done(habit_factory, habit_repo, notifier):
    habit = habit_factory(repeat="daily", repeat_count=3, reminder_offsets=[1])
    habit.completion_dates = [date(2024, 1, 16)]
    habit_repo.save(habit)

    assert dispatch_due_reminders(habit_repo, notifier, today=TODAY) == 0


def test_upcoming_occurrences_with_several_offsets(habit_factory):
    habit = habit_factory(repeat="daily", repeat_count=5, reminder_offsets=[1, 3])

    assert upcoming_occurrences(habit, TODAY) == [date(2024, 1, 16), date(2024, 1, 18)]



def test_dispatch_with_nothing_due(habit_repo, notifier):
    assert dispatch_due_reminders(habit_repo, notifier, today=TODAY) == 0


def test_scheduler_registers_daily_job():
    calls = []
    scheduler = ReminderScheduler(lambda: calls.append(1) or 0, hour=7)
    scheduler.start()
    try:
        assert scheduler.running
        job = scheduler.scheduler.get_job(REMINDER_JOB_ID)
        assert job is not None
        assert "hour='7'" in str(job.trigger)
    finally:
        scheduler.stop()
    assert not scheduler.running


def test_scheduler_job_swallows_dispatch_errors():
    def _boom():
        raise RuntimeError("database is locked")

    scheduler = ReminderScheduler(_boom)
    # Runs inline; a failing dispatch is logged instead of killing the worker.
    scheduler._run_dispatch()
