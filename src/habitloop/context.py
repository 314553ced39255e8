"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import (
    SQLModelBadHabitRepository,
    SQLModelDistractionRepository,
    SQLModelHabitRepository,
    SQLModelNotificationRepository,
    SQLModelUserRepository,
)
from .scheduler import ReminderScheduler
from .services.bad_habits import BadHabitService
from .services.connections import ConnectionDirectory
from .services.distractions import DistractionService
from .services.habits import HabitService
from .services.notifications import Notifier
from .services.reminders import dispatch_due_reminders
from .services.shared_habits import SharedHabitService


@dataclass
class AppContext:
    """Centralized application context with repositories and services."""

    # Configuration
    config: BaseConfig

    # Database
    engine: Engine
    session_factory: SessionFactory

    # Repositories
    habit_repo: SQLModelHabitRepository
    user_repo: SQLModelUserRepository
    notification_repo: SQLModelNotificationRepository
    bad_habit_repo: SQLModelBadHabitRepository
    distraction_repo: SQLModelDistractionRepository

    # Real-time delivery
    connections: ConnectionDirectory
    notifier: Notifier

    # Services
    habits: HabitService
    shared_habits: SharedHabitService
    bad_habits: BadHabitService
    distractions: DistractionService

    scheduler: Optional[ReminderScheduler] = field(default=None)

    def dispatch_reminders(self) -> int:
        return dispatch_due_reminders(self.habit_repo, self.notifier)


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine, session_factory = bootstrap_database(config)

    habit_repo = SQLModelHabitRepository(session_factory)
    user_repo = SQLModelUserRepository(session_factory)
    notification_repo = SQLModelNotificationRepository(session_factory)
    bad_habit_repo = SQLModelBadHabitRepository(session_factory)
    distraction_repo = SQLModelDistractionRepository(session_factory)

    connections = ConnectionDirectory()
    notifier = Notifier(
        notification_repo, connections, pending_limit=config.PENDING_NOTIFICATION_LIMIT
    )
    habits = HabitService(habit_repo, notifier)

    ctx = AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        habit_repo=habit_repo,
        user_repo=user_repo,
        notification_repo=notification_repo,
        bad_habit_repo=bad_habit_repo,
        distraction_repo=distraction_repo,
        connections=connections,
        notifier=notifier,
        habits=habits,
        shared_habits=SharedHabitService(
            habit_repo, user_repo, notifier, session_factory, habits
        ),
        bad_habits=BadHabitService(bad_habit_repo),
        distractions=DistractionService(distraction_repo),
    )

    if config.ENABLE_SCHEDULER:
        ctx.scheduler = ReminderScheduler(ctx.dispatch_reminders, hour=config.REMINDER_HOUR)
        ctx.scheduler.start()
    return ctx
