"""Notification preference and notification log store."""

from datetime import timedelta
from typing import Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from finvault.codec import Codec
from finvault.database.mappers import (
    encrypt_notification_config,
    encrypt_notification_log_for_create,
    notification_log_to_domain,
    notification_preference_to_domain,
)
from finvault.database.models import NotificationLog as ORMNotificationLog
from finvault.database.models import NotificationPreference as ORMNotificationPreference
from finvault.database.models import utcnow
from finvault.database.repository import RecordRepository
from finvault.domain.inputs import provided_fields
from finvault.domain.notifications import (
    NotificationLogCreate,
    NotificationLogEntry,
    NotificationPreference,
    NotificationPreferenceUpdate,
    NotificationType,
)
from finvault.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_RETENTION_DAYS = 90


class NotificationStore:
    """Store for per-type notification preferences and the sent-notification log."""

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    # Preferences

    def seed_default_preferences(self) -> None:
        """Create an enabled preference with default config for every type.

        Does nothing once any preference exists. A type created concurrently
        by another caller is skipped.
        """
        with self.repository.session() as session:
            if session.scalar(select(func.count()).select_from(ORMNotificationPreference)):
                return

        for notification_type in NotificationType:
            try:
                with self.repository.transaction() as session:
                    session.add(
                        ORMNotificationPreference(type=notification_type.value, enabled=True, config=None)
                    )
            except IntegrityError:
                if self.get_preference(notification_type) is None:
                    raise
                logger.warning("Preference for %s already seeded", notification_type.value)

    def list_preferences(self) -> list[NotificationPreference]:
        self.seed_default_preferences()
        stmt = select(ORMNotificationPreference).order_by(ORMNotificationPreference.type)
        with self.repository.session() as session:
            return [notification_preference_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def get_preference(self, notification_type: NotificationType) -> Optional[NotificationPreference]:
        stmt = select(ORMNotificationPreference).where(
            ORMNotificationPreference.type == NotificationType(notification_type).value
        )
        with self.repository.session() as session:
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return notification_preference_to_domain(self.codec, row)

    def update_preference(
        self,
        notification_type: NotificationType,
        data: NotificationPreferenceUpdate,
    ) -> Optional[NotificationPreference]:
        """Update enabled and/or config. Returns None if the type has no preference row."""
        values = provided_fields(data)
        if "config" in values:
            values["config"] = encrypt_notification_config(self.codec, values["config"])
        stmt = select(ORMNotificationPreference).where(
            ORMNotificationPreference.type == NotificationType(notification_type).value
        )
        with self.repository.transaction() as session:
            row = session.scalars(stmt).first()
            if row is None:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            session.flush()
            preference = notification_preference_to_domain(self.codec, row)
        return preference

    # Log

    def create_notification_log(self, data: NotificationLogCreate) -> Optional[NotificationLogEntry]:
        """Record a sent notification.

        Returns:
            The entry, or None if one with the same dedupe key was already recorded
        """
        try:
            with self.repository.transaction() as session:
                row = ORMNotificationLog(**encrypt_notification_log_for_create(self.codec, data))
                session.add(row)
                session.flush()
                entry = notification_log_to_domain(self.codec, row)
        except IntegrityError:
            if not self.dedupe_keys_exist([data.dedupe_key]):
                raise
            logger.warning("Notification %s already sent", data.dedupe_key)
            return None
        return entry

    def list_notification_logs(self, limit: int = 20, offset: int = 0) -> tuple[list[NotificationLogEntry], int]:
        """Uncleared notifications newest first, with the total uncleared count."""
        visible = ORMNotificationLog.is_cleared.is_(False)
        stmt = (
            select(ORMNotificationLog)
            .where(visible)
            .order_by(ORMNotificationLog.sent_at.desc())
            .limit(limit)
            .offset(offset)
        )
        with self.repository.session() as session:
            entries = [notification_log_to_domain(self.codec, row) for row in session.scalars(stmt)]
            total = session.scalar(select(func.count()).select_from(ORMNotificationLog).where(visible))
        return entries, total

    def unread_count(self) -> int:
        with self.repository.session() as session:
            return session.scalar(
                select(func.count())
                .select_from(ORMNotificationLog)
                .where(ORMNotificationLog.is_read.is_(False), ORMNotificationLog.is_cleared.is_(False))
            )

    def mark_all_read(self) -> int:
        with self.repository.transaction() as session:
            result = session.execute(
                update(ORMNotificationLog)
                .where(ORMNotificationLog.is_read.is_(False), ORMNotificationLog.is_cleared.is_(False))
                .values(is_read=True)
            )
            count = result.rowcount
        return count

    def clear_history(self) -> int:
        """Hide every notification from the log listing. Rows are kept for dedupe."""
        with self.repository.transaction() as session:
            result = session.execute(
                update(ORMNotificationLog)
                .where(ORMNotificationLog.is_cleared.is_(False))
                .values(is_cleared=True)
            )
            count = result.rowcount
        return count

    def dedupe_keys_exist(self, dedupe_keys: Iterable[str]) -> set[str]:
        """Return the subset of dedupe keys that were already recorded."""
        keys = list(dedupe_keys)
        if not keys:
            return set()
        with self.repository.session() as session:
            return set(
                session.scalars(
                    select(ORMNotificationLog.dedupe_key).where(ORMNotificationLog.dedupe_key.in_(keys))
                )
            )

    def cleanup_old_logs(self, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """Delete log rows sent more than retention_days ago."""
        cutoff = utcnow() - timedelta(days=retention_days)
        with self.repository.transaction() as session:
            result = session.execute(delete(ORMNotificationLog).where(ORMNotificationLog.sent_at < cutoff))
            count = result.rowcount
        logger.info("Removed %d notification logs older than %d days", count, retention_days)
        return count
