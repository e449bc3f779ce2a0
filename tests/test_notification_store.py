"""Tests for notification preferences, configs and the notification log."""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import update

from finvault.database.models import NotificationLog as ORMNotificationLog
from finvault.database.models import utcnow
from finvault.domain.notifications import (
    BudgetOverspendConfig,
    LargeTransactionConfig,
    MilestonesConfig,
    NotificationLogCreate,
    NotificationPreferenceUpdate,
    NotificationType,
    config_to_dict,
    default_config,
    parse_config,
)


def _log(store, key, title="Bill due", **kwargs):
    return store.create_notification_log(
        NotificationLogCreate(type=NotificationType.BILL_DUE, title=title, body="Internet is due", dedupe_key=key, **kwargs)
    )


class TestConfigs:
    def test_every_type_has_default(self):
        for notification_type in NotificationType:
            assert default_config(notification_type) is not None

    def test_tagged_dict(self):
        data = config_to_dict(LargeTransactionConfig(threshold=Decimal("750")))

        assert data == {"type": "large_transaction", "threshold": "750"}

    def test_parse_restores_types(self):
        config = MilestonesConfig(net_worth_milestones=(Decimal("1000"),), loan_payoff_percent_milestones=(50,))

        parsed = parse_config(NotificationType.MILESTONES, config_to_dict(config))

        assert parsed == config

    def test_parse_fills_defaults(self):
        parsed = parse_config(NotificationType.BUDGET_OVERSPEND, {"warn_at_percent": 70})

        assert parsed == BudgetOverspendConfig(warn_at_percent=70, alert_at_percent=100)

    def test_parse_rejects_mismatched_tag(self):
        with pytest.raises(ValueError):
            parse_config(NotificationType.BILL_DUE, {"type": "milestones"})


class TestPreferences:
    def test_list_seeds_every_type(self, notification_store):
        preferences = notification_store.list_preferences()

        assert {p.type for p in preferences} == set(NotificationType)
        assert all(p.enabled for p in preferences)
        assert all(p.config == default_config(p.type) for p in preferences)

    def test_seeding_is_idempotent(self, notification_store):
        notification_store.seed_default_preferences()
        notification_store.seed_default_preferences()

        assert len(notification_store.list_preferences()) == len(NotificationType)

    def test_update_config_and_enabled(self, notification_store):
        notification_store.seed_default_preferences()

        updated = notification_store.update_preference(
            NotificationType.LARGE_TRANSACTION,
            NotificationPreferenceUpdate(enabled=False, config=LargeTransactionConfig(threshold=Decimal("1000"))),
        )

        assert updated.enabled is False
        assert notification_store.get_preference(NotificationType.LARGE_TRANSACTION).config == LargeTransactionConfig(
            threshold=Decimal("1000")
        )

    def test_update_before_seeding_returns_none(self, notification_store):
        assert notification_store.update_preference(
            NotificationType.BILL_DUE, NotificationPreferenceUpdate(enabled=False)
        ) is None


class TestNotificationLog:
    def test_create_and_list(self, notification_store):
        entry = _log(notification_store, "bill:1:2024-03-15", metadata={"bill_id": "1"})

        entries, total = notification_store.list_notification_logs()
        assert total == 1
        assert entries[0].id == entry.id
        assert entries[0].title == "Bill due"
        assert entries[0].metadata == {"bill_id": "1"}
        assert entries[0].is_read is False

    def test_duplicate_dedupe_key_returns_none(self, notification_store):
        assert _log(notification_store, "same") is not None
        assert _log(notification_store, "same") is None
        assert notification_store.list_notification_logs()[1] == 1

    def test_dedupe_keys_exist(self, notification_store):
        _log(notification_store, "a")
        _log(notification_store, "b")

        assert notification_store.dedupe_keys_exist(["a", "c"]) == {"a"}
        assert notification_store.dedupe_keys_exist([]) == set()

    def test_read_and_clear(self, notification_store):
        _log(notification_store, "a")
        _log(notification_store, "b")

        assert notification_store.unread_count() == 2
        assert notification_store.mark_all_read() == 2
        assert notification_store.unread_count() == 0

        assert notification_store.clear_history() == 2
        assert notification_store.list_notification_logs() == ([], 0)
        # Cleared rows still block re-sending
        assert _log(notification_store, "a") is None

    def test_cleanup_old_logs(self, notification_store, repository):
        old = _log(notification_store, "old")
        _log(notification_store, "new")
        with repository.transaction() as session:
            session.execute(
                update(ORMNotificationLog)
                .where(ORMNotificationLog.id == old.id)
                .values(sent_at=utcnow() - timedelta(days=120))
            )

        assert notification_store.cleanup_old_logs() == 1
        assert notification_store.dedupe_keys_exist(["old", "new"]) == {"new"}
