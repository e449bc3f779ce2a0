"""Tests for the encrypting mappers."""

from datetime import date, datetime
from decimal import Decimal

from finvault.database.mappers import (
    compute_holding_values,
    encrypt_account_for_create,
    encrypt_account_for_update,
    encrypt_goal_for_create,
    encrypt_goal_for_update,
    encrypt_holding_for_update,
    encrypt_profile,
    goal_to_domain,
    profile_to_domain,
)
from finvault.database.models import Goal as ORMGoal
from finvault.domain.entities import AccountType, CreditProfile, GoalType, LoanProfile
from finvault.domain.inputs import (
    UNSET,
    AccountCreate,
    AccountUpdate,
    GoalCreate,
    GoalUpdate,
    HoldingUpdate,
    provided_fields,
)


class TestCreate:
    """Tests for encrypt-for-create."""

    def test_absent_optional_sensitive_fields_are_present_as_none(self, codec):
        values = encrypt_account_for_create(
            codec, AccountCreate(name="Checking", type=AccountType.CHECKING), sort_order=0
        )

        for key in ("account_number", "estimated_value", "interest_rate", "loan_type", "maturity_date"):
            assert key in values
            assert values[key] is None

    def test_required_fields_encrypted_with_defaults(self, codec):
        values = encrypt_account_for_create(
            codec, AccountCreate(name="Checking", type=AccountType.CHECKING), sort_order=3
        )

        assert values["name"] != "Checking"
        assert codec.decrypt_string(values["name"]) == "Checking"
        assert codec.decrypt_string(values["institution"]) == ""
        assert codec.decrypt_number(values["current_balance"]) == Decimal("0")
        assert values["type"] == "checking"
        assert values["sort_order"] == 3

    def test_plaintext_flags_only_when_supplied(self, codec):
        values = encrypt_account_for_create(
            codec, AccountCreate(name="A", type=AccountType.SAVINGS, is_favorite=True), sort_order=0
        )

        assert values["is_favorite"] is True
        assert "is_active" not in values
        assert "dti_percentage" not in values


class TestPartialUpdate:
    """An update only carries the keys the caller provided."""

    def test_single_field(self, codec):
        values = encrypt_account_for_update(codec, AccountUpdate(name="Renamed"))

        assert list(values) == ["name"]
        assert codec.decrypt_string(values["name"]) == "Renamed"

    def test_explicit_none_is_kept(self, codec):
        values = encrypt_holding_for_update(codec, HoldingUpdate(ticker=None))

        assert values == {"ticker": None}

    def test_empty_update(self, codec):
        assert encrypt_account_for_update(codec, AccountUpdate()) == {}

    def test_plaintext_field_passes_through(self, codec):
        values = encrypt_account_for_update(codec, AccountUpdate(is_active=False, type=AccountType.LOAN))

        assert values == {"is_active": False, "type": "loan"}

    def test_provided_fields_skips_unset(self):
        update = GoalUpdate(notes=None, priority=2)

        assert provided_fields(update) == {"notes": None, "priority": 2}
        assert update.name is UNSET
        assert not UNSET


class TestGoalMapping:
    def _row(self, codec, values):
        now = datetime(2024, 1, 1)
        return ORMGoal(
            id="g1",
            priority=values.get("priority", 0),
            is_active=True,
            is_completed=False,
            completed_at=None,
            created_at=now,
            updated_at=now,
            **{k: v for k, v in values.items() if k != "priority"},
        )

    def test_empty_account_ids_normalized(self, codec):
        base = dict(name="Emergency", type=GoalType.SAVINGS, target_amount=Decimal("10000"))
        with_empty = encrypt_goal_for_create(codec, GoalCreate(**base, account_ids=[]), sort_order=0)
        without = encrypt_goal_for_create(codec, GoalCreate(**base), sort_order=0)

        assert with_empty["account_ids"] is None
        assert without["account_ids"] is None
        assert goal_to_domain(codec, self._row(codec, with_empty)).account_ids is None
        assert goal_to_domain(codec, self._row(codec, without)).account_ids is None

    def test_account_ids_round_trip(self, codec):
        values = encrypt_goal_for_create(
            codec,
            GoalCreate(
                name="House",
                type=GoalType.SAVINGS,
                target_amount=Decimal("50000"),
                account_ids=["a1", "a2"],
                target_date=date(2026, 6, 1),
            ),
            sort_order=1,
        )
        goal = goal_to_domain(codec, self._row(codec, values))

        assert goal.account_ids == ("a1", "a2")
        assert goal.target_date == date(2026, 6, 1)
        assert goal.target_amount == Decimal("50000")
        assert goal.current_amount is None

    def test_update_empty_account_ids(self, codec):
        assert encrypt_goal_for_update(codec, GoalUpdate(account_ids=[])) == {"account_ids": None}

    def test_completion_stamps_completed_at(self, codec):
        values = encrypt_goal_for_update(codec, GoalUpdate(is_completed=True))

        assert values["is_completed"] is True
        assert isinstance(values["completed_at"], datetime)

    def test_uncompletion_clears_completed_at(self, codec):
        values = encrypt_goal_for_update(codec, GoalUpdate(is_completed=False))

        assert values == {"is_completed": False, "completed_at": None}

    def test_completed_at_untouched_when_not_provided(self, codec):
        assert "completed_at" not in encrypt_goal_for_update(codec, GoalUpdate(name="x"))


class TestProfiles:
    def test_empty_profile_is_not_stored(self, codec):
        assert encrypt_profile(codec, CreditProfile()) is None
        assert encrypt_profile(codec, None) is None

    def test_missing_profile_decrypts_to_none(self, codec):
        assert profile_to_domain(codec, LoanProfile, None) is None

    def test_profile_fields_encrypted(self, codec):
        values = encrypt_profile(
            codec, CreditProfile(apr=Decimal("24.99"), payment_due_date=date(2024, 4, 5))
        )

        assert codec.decrypt_number(values["apr"]) == Decimal("24.99")
        assert codec.decrypt_date(values["payment_due_date"]) == date(2024, 4, 5)
        assert values["credit_limit"] is None


class TestHoldingValues:
    def test_all_values(self):
        market_value, gain_loss, gain_loss_pct = compute_holding_values(
            Decimal("10"), Decimal("100"), Decimal("120")
        )

        assert market_value == Decimal("1200")
        assert gain_loss == Decimal("200")
        assert gain_loss_pct == Decimal("20")

    def test_missing_price_or_shares(self):
        assert compute_holding_values(None, Decimal("100"), Decimal("120")) == (None, None, None)
        assert compute_holding_values(Decimal("10"), Decimal("100"), None) == (None, None, None)

    def test_missing_cost_basis(self):
        assert compute_holding_values(Decimal("2"), None, Decimal("50")) == (Decimal("100"), None, None)

    def test_zero_cost(self):
        _, gain_loss, gain_loss_pct = compute_holding_values(Decimal("5"), Decimal("0"), Decimal("10"))

        assert gain_loss == Decimal("50")
        assert gain_loss_pct == Decimal("0")
