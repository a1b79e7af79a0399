"""访问策略测试"""

import pytest
from taskdesk.core.access import AccessPolicy
from taskdesk.core.exceptions import TaskPermissionError
from taskdesk.core.identity import IdentityResolver
from taskdesk.core.models import MatchStrategyName, Principal


@pytest.fixture
def policy() -> AccessPolicy:
    return AccessPolicy()


class TestPredicates:
    def test_admin_can_do_everything(self, policy, admin, make_task):
        task = make_task(assigned_to="EMP999")
        assert policy.can_create(admin)
        assert policy.can_delete(admin)
        assert policy.can_edit_full(admin, task)
        assert policy.can_update_progress(admin, task)
        assert policy.can_comment(admin, task)
        assert policy.can_view(admin, task)

    def test_employee_limited_to_own_progress(self, policy, alice, make_task):
        own = make_task(assigned_to="EMP001")
        other = make_task(assigned_to="EMP002")
        assert not policy.can_create(alice)
        assert not policy.can_delete(alice)
        assert not policy.can_edit_full(alice, own)
        assert policy.can_update_progress(alice, own)
        assert not policy.can_update_progress(alice, other)

    def test_any_authenticated_user_can_comment(self, policy, bob, make_task):
        assert policy.can_comment(bob, make_task(assigned_to="EMP001"))

    def test_anonymous_cannot_comment(self, policy, make_task):
        assert not policy.can_comment(Principal.anonymous(), make_task())

    def test_view_follows_resolver(self, policy, alice, bob, make_task):
        task = make_task(assigned_to="alice@example.com")
        assert policy.can_view(alice, task)
        assert not policy.can_view(bob, task)

    def test_uses_injected_resolver(self, alice, make_task):
        policy = AccessPolicy(IdentityResolver.from_names([MatchStrategyName.EXACT]))
        assert not policy.can_update_progress(alice, make_task(assigned_to="emp001"))


class TestRequire:
    def test_require_create_message(self, policy, alice):
        with pytest.raises(TaskPermissionError, match="Only admins can create tasks"):
            policy.require_create(alice)

    def test_require_delete_message(self, policy, alice):
        with pytest.raises(TaskPermissionError, match="Only admins can delete tasks"):
            policy.require_delete(alice)

    def test_require_edit_full(self, policy, alice, make_task):
        with pytest.raises(TaskPermissionError, match="Only admins can edit tasks"):
            policy.require_edit_full(alice, make_task())

    def test_require_update_progress(self, policy, bob, make_task):
        with pytest.raises(TaskPermissionError, match="assignee or an admin"):
            policy.require_update_progress(bob, make_task(assigned_to="EMP001"))

    def test_require_comment(self, policy, make_task):
        with pytest.raises(TaskPermissionError, match="Sign in"):
            policy.require_comment(Principal.anonymous(), make_task())

    def test_permission_error_is_builtin_subclass(self, policy, alice):
        with pytest.raises(PermissionError):
            policy.require_delete(alice)

    def test_allowed_calls_return_none(self, policy, admin, make_task):
        assert policy.require_create(admin) is None
        assert policy.require_update_progress(admin, make_task()) is None
