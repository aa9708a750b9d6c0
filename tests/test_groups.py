"""
Tests for membership checks and group administration.
"""
import pytest

from shared_expenses.errors import AuthorizationError, NotFoundError, ValidationError
from shared_expenses.models import Expense, ExpenseSplit, GroupMember
from shared_expenses.services.expenses import create_expense
from shared_expenses.services.groups import (
    add_members,
    create_group,
    delete_group,
    get_group,
    groups_administered,
    groups_for_member,
    remove_members,
)
from shared_expenses.services.membership import all_members_of, is_member, users_related
from factories import draft, split


class TestMembershipOracle:
    def test_is_member(self, group, alice, bob, carol):
        assert is_member(alice.id, group.id)
        assert is_member(bob.id, group.id)
        assert not is_member(carol.id, group.id)

    def test_all_members_of_deduplicates(self, group, alice, bob):
        assert all_members_of([alice.id, bob.id, alice.id, bob.id], group.id)

    def test_all_members_of_fails_if_any_is_absent(self, group, alice, bob, carol):
        assert not all_members_of([alice.id, carol.id, bob.id], group.id)
        assert not all_members_of(["no-such-user"], group.id)

    def test_empty_set_is_trivially_members(self, group):
        assert all_members_of([], group.id)

    def test_users_related_through_a_shared_group(self, group, alice, bob, carol):
        assert users_related(alice.id, bob.id)
        assert not users_related(alice.id, carol.id)
        assert users_related(carol.id, carol.id)


class TestGroupAdministration:
    def test_creator_is_first_member(self, alice):
        group = create_group("Flat Share", None, alice.id)
        assert [m.user_id for m in get_group(group.id).members] == [alice.id]

    def test_create_group_rejects_bad_name(self, alice):
        with pytest.raises(ValidationError):
            create_group("x", None, alice.id)

    def test_add_members_skips_unknown_users(self, alice, carol):
        group = create_group("Flat Share", None, alice.id)
        added = add_members(group.id, alice.id, [carol.id, "ghost"])
        assert added == [carol.id]
        assert is_member(carol.id, group.id)

    def test_add_members_is_idempotent(self, group, alice, bob):
        add_members(group.id, alice.id, [bob.id])
        assert GroupMember.query.filter_by(group_id=group.id, user_id=bob.id).count() == 1

    def test_add_only_unknown_users_is_rejected(self, group, alice):
        with pytest.raises(ValidationError, match="no valid user IDs"):
            add_members(group.id, alice.id, ["ghost"])

    def test_only_admin_adds_members(self, group, bob, carol):
        with pytest.raises(AuthorizationError):
            add_members(group.id, bob.id, [carol.id])
        assert not is_member(carol.id, group.id)

    def test_admin_removes_member(self, group, alice, bob):
        remove_members(group.id, alice.id, [bob.id])
        assert not is_member(bob.id, group.id)

    def test_only_admin_removes_members(self, group, bob):
        with pytest.raises(AuthorizationError):
            remove_members(group.id, bob.id, [bob.id])

    @pytest.mark.parametrize("requester", ["alice", "bob"])
    def test_creator_can_never_be_removed(self, request, group, alice, requester):
        actor = request.getfixturevalue(requester)
        with pytest.raises(AuthorizationError, match="cannot remove group admin"):
            remove_members(group.id, actor.id, [alice.id])
        assert is_member(alice.id, group.id)

    def test_group_listings(self, group, make_group, alice, bob):
        bobs = make_group(bob, name="Bob Things")
        assert {g.id for g in groups_for_member(bob.id)} == {group.id, bobs.id}
        assert [g.id for g in groups_administered(bob.id)] == [bobs.id]

    def test_delete_group_cascades(self, group, alice, bob):
        create_expense(draft(group, alice, splits=[split(alice, "100", True), split(bob, "100", False)]))
        group_id = group.id
        delete_group(group_id, alice.id)
        with pytest.raises(NotFoundError):
            get_group(group_id)
        assert Expense.query.count() == 0
        assert ExpenseSplit.query.count() == 0
        assert GroupMember.query.filter_by(group_id=group_id).count() == 0

    def test_only_admin_deletes_group(self, group, bob):
        with pytest.raises(AuthorizationError):
            delete_group(group.id, bob.id)
