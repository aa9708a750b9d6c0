"""
Tests for split reconciliation: membership gate and paid/owed totals.
"""
from decimal import Decimal

import pytest

from shared_expenses.errors import ErrorKind, ValidationError
from shared_expenses.services.reconciliation import split_totals, validate_and_reconcile
from factories import draft, split


class TestTotals:
    def test_balanced_paid_and_owed_is_accepted(self, group, alice, bob):
        splits = [split(alice, "60", True), split(bob, "40", True), split(alice, "30", False), split(bob, "70", False)]
        result = validate_and_reconcile(draft(group, alice), splits)
        assert result.splits == splits
        assert result.group_id == group.id

    def test_paid_total_short_is_rejected(self, group, alice, bob):
        splits = [split(alice, "60", True), split(bob, "30", True), split(alice, "100", False)]
        with pytest.raises(ValidationError, match="paid split total does not match expense amount"):
            validate_and_reconcile(draft(group, alice), splits)

    def test_owed_total_short_is_rejected(self, group, alice, bob):
        splits = [split(alice, "100", True), split(alice, "50", False), split(bob, "40", False)]
        with pytest.raises(ValidationError, match="owed split total does not match expense amount"):
            validate_and_reconcile(draft(group, alice), splits)

    def test_paid_check_runs_before_owed_check(self, group, alice):
        splits = [split(alice, "10", True), split(alice, "10", False)]
        with pytest.raises(ValidationError, match="paid split total"):
            validate_and_reconcile(draft(group, alice), splits)

    def test_difference_within_tolerance_is_accepted(self, group, alice, bob):
        splits = [split(alice, "100.01", True), split(alice, "33.33", False), split(bob, "66.66", False)]
        validate_and_reconcile(draft(group, alice), splits)

    def test_difference_beyond_tolerance_is_rejected(self, group, alice):
        splits = [split(alice, "100.02", True), split(alice, "100", False)]
        with pytest.raises(ValidationError):
            validate_and_reconcile(draft(group, alice), splits)

    def test_explicit_tolerance_overrides_setting(self, group, alice):
        splits = [split(alice, "101", True), split(alice, "99", False)]
        validate_and_reconcile(draft(group, alice), splits, tolerance=Decimal("1"))

    def test_tolerance_is_read_from_config(self, app, group, alice):
        app.config["SPLIT_TOLERANCE"] = "5"
        splits = [split(alice, "104", True), split(alice, "96", False)]
        validate_and_reconcile(draft(group, alice), splits)

    def test_unparseable_tolerance_falls_back_silently(self, app, group, alice):
        app.config["SPLIT_TOLERANCE"] = "not-a-number"
        with pytest.raises(ValidationError, match="paid split total"):
            validate_and_reconcile(draft(group, alice), [split(alice, "100.02", True), split(alice, "100", False)])
        validate_and_reconcile(draft(group, alice), [split(alice, "100.01", True), split(alice, "100", False)])

    @pytest.mark.parametrize("flag", ["is_incomplete_amount", "is_incomplete_split"])
    def test_incomplete_flags_skip_total_checks(self, group, alice, flag):
        expense = draft(group, alice, **{flag: True})
        validate_and_reconcile(expense, [split(alice, "5", True)])

    def test_split_totals_keep_a_user_on_both_sides(self, alice):
        paid, owed = split_totals([split(alice, "100", True), split(alice, "25", False)])
        assert (paid, owed) == (Decimal("100"), Decimal("25"))


class TestMembershipGate:
    def test_outsider_rejects_whole_expense(self, group, alice, bob, carol):
        splits = [split(alice, "100", True), split(bob, "50", False), split(carol, "50", False)]
        with pytest.raises(ValidationError, match="split user not in group") as excinfo:
            validate_and_reconcile(draft(group, alice), splits)
        assert excinfo.value.kind is ErrorKind.VALIDATION

    def test_membership_checked_even_for_incomplete_expense(self, group, alice, carol):
        expense = draft(group, alice, is_incomplete_split=True)
        with pytest.raises(ValidationError, match="split user not in group"):
            validate_and_reconcile(expense, [split(carol, "1", True)])

    def test_user_on_both_sides_is_checked_once(self, group, alice):
        splits = [split(alice, "100", True), split(alice, "100", False)]
        validate_and_reconcile(draft(group, alice), splits)


class TestFieldRules:
    def test_empty_split_list_is_rejected(self, group, alice):
        with pytest.raises(ValidationError, match="no splits provided"):
            validate_and_reconcile(draft(group, alice), [])

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amount_is_rejected(self, group, alice, amount):
        with pytest.raises(ValidationError, match="invalid amount"):
            validate_and_reconcile(draft(group, alice, amount=amount), [split(alice, "1", True)])

    def test_blank_title_is_rejected(self, group, alice):
        with pytest.raises(ValidationError, match="title required"):
            validate_and_reconcile(draft(group, alice, title="   "), [split(alice, "100", True)])

    @pytest.mark.parametrize(
        "amount, message",
        [("0.004", "at most 2 decimal places"), ("12.345", "at most 2 decimal places"),
         ("10000000000", "out of range"), ("NaN", "out of range")],
    )
    def test_amount_must_be_storable_as_cents(self, group, alice, amount, message):
        with pytest.raises(ValidationError, match=message):
            validate_and_reconcile(draft(group, alice, amount=amount), [split(alice, "1", True)])

    def test_sub_cent_splits_are_rejected_before_totals(self, group, alice):
        splits = [split(alice, "0.004", True)] * 250 + [split(alice, "1", False)]
        with pytest.raises(ValidationError, match="split amount must have at most 2 decimal places"):
            validate_and_reconcile(draft(group, alice, amount="1.00"), splits)

    def test_trailing_zeros_are_not_extra_precision(self, group, alice):
        splits = [split(alice, "1.0000", True), split(alice, "1.000", False)]
        validate_and_reconcile(draft(group, alice, amount="1.000"), splits)

    def test_negative_split_amount_is_rejected(self, group, alice):
        splits = [split(alice, "-100", True), split(alice, "100", False)]
        with pytest.raises(ValidationError, match="must not be negative"):
            validate_and_reconcile(draft(group, alice), splits)
