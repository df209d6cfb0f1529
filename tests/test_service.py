"""Unit tests for auth/service.py -- the auth gateway.

Covers:
- register -> login round trip; token identity matches the registered user
- Missing/blank fields -> InvalidInput; duplicate email -> Conflict
- Unknown email and wrong password raise indistinguishable errors
- Audit failures never fail registration or login
- dashboard(): NotFound for a vanished user, read-only, newest-first
- log_activity(): validation and NotFound for a vanished user
- Concurrent duplicate registrations: exactly one succeeds
"""

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

import auth.service as service_module
from audit.recorder import ActivityRecorder
from auth.errors import AuthenticationFailed, Conflict, InvalidInput, NotFound
from auth.models import TokenClaims
from auth.passwords import DUMMY_HASH
from auth.service import ACTION_LOGGED_IN, ACTION_REGISTERED, AuthService
from auth.tokens import decode_access_token
from core.db import activity_log, users


def _claims(user_id: int, email: str = "ada@x.com", name: str = "Ada") -> TokenClaims:
    now = datetime.now(timezone.utc)
    return TokenClaims(user_id=user_id, email=email, name=name, issued_at=now, expires_at=now + timedelta(hours=2))


class TestRegister:
    def test_register_then_login(self, service):
        uid = service.register("Ada", "ada@x.com", "secret1")
        result = service.login("ada@x.com", "secret1")
        claims = decode_access_token(result.token)
        assert claims is not None
        assert (claims.user_id, claims.email, claims.name) == (uid, "ada@x.com", "Ada")
        assert result.user.id == uid
        assert not hasattr(result.user, "password_hash")

    def test_password_is_stored_hashed(self, service, user_store):
        service.register("Ada", "ada@x.com", "secret1")
        stored = user_store.get_by_email("ada@x.com")
        assert stored.password_hash != "secret1"

    @pytest.mark.parametrize(
        "name,email,password",
        [
            (None, "ada@x.com", "secret1"),
            ("Ada", None, "secret1"),
            ("Ada", "ada@x.com", None),
            ("", "ada@x.com", "secret1"),
            ("   ", "ada@x.com", "secret1"),
            ("Ada", "ada@x.com", ""),
        ],
    )
    def test_missing_fields_are_client_errors(self, service, user_store, name, email, password):
        with pytest.raises(InvalidInput):
            service.register(name, email, password)
        assert user_store.count_by_email("ada@x.com") == 0

    def test_overlong_password_is_rejected(self, service):
        with pytest.raises(InvalidInput):
            service.register("Ada", "ada@x.com", "é" * 40)  # 80 bytes in UTF-8

    def test_duplicate_email_is_conflict(self, service, user_store):
        service.register("Ada", "ada@x.com", "secret1")
        with pytest.raises(Conflict):
            service.register("Other", "ada@x.com", "secret2")
        assert user_store.count_by_email("ada@x.com") == 1

    def test_registration_is_recorded(self, service, activity_store):
        uid = service.register("Ada", "ada@x.com", "secret1")
        assert [a.action for a in activity_store.recent_for_user(uid)] == [ACTION_REGISTERED]

    def test_audit_failure_does_not_fail_registration(self, user_store, activity_store):
        broken = MagicMock()
        broken.append.side_effect = RuntimeError("audit down")
        service = AuthService(user_store, activity_store, ActivityRecorder(broken))
        uid = service.register("Ada", "ada@x.com", "secret1")
        assert user_store.get_profile(uid) is not None
        assert service.login("ada@x.com", "secret1").token


class TestLogin:
    def test_login_is_recorded_after_registration(self, service, activity_store):
        uid = service.register("Ada", "ada@x.com", "secret1")
        service.login("ada@x.com", "secret1")
        assert [a.action for a in activity_store.recent_for_user(uid)] == [ACTION_LOGGED_IN, ACTION_REGISTERED]

    def test_unknown_email_and_wrong_password_are_indistinguishable(self, service):
        service.register("Ada", "ada@x.com", "secret1")
        with pytest.raises(AuthenticationFailed) as unknown:
            service.login("nobody@x.com", "secret1")
        with pytest.raises(AuthenticationFailed) as wrong:
            service.login("ada@x.com", "wrong")
        assert (unknown.value.status_code, unknown.value.code, unknown.value.message) == (
            wrong.value.status_code,
            wrong.value.code,
            wrong.value.message,
        )

    def test_unknown_email_still_runs_bcrypt(self, service, monkeypatch):
        checked: list[str] = []
        real_verify = service_module.verify_password

        def spy(plain: str, hashed: str) -> bool:
            checked.append(hashed)
            return real_verify(plain, hashed)

        monkeypatch.setattr(service_module, "verify_password", spy)
        with pytest.raises(AuthenticationFailed):
            service.login("nobody@x.com", "secret1")
        assert checked == [DUMMY_HASH]

    def test_failed_login_records_nothing(self, service, activity_store):
        uid = service.register("Ada", "ada@x.com", "secret1")
        with pytest.raises(AuthenticationFailed):
            service.login("ada@x.com", "wrong")
        assert len(activity_store.recent_for_user(uid)) == 1

    @pytest.mark.parametrize("email,password", [(None, "x"), ("a@x.com", None), ("", "")])
    def test_missing_fields_are_client_errors(self, service, email, password):
        with pytest.raises(InvalidInput):
            service.login(email, password)

    def test_email_is_case_sensitive(self, service):
        service.register("Ada", "ada@x.com", "secret1")
        with pytest.raises(AuthenticationFailed):
            service.login("Ada@x.com", "secret1")

    def test_email_is_matched_exactly_without_trimming(self, service, user_store):
        service.register("Ada", "ada@x.com", "secret1")
        with pytest.raises(AuthenticationFailed):
            service.login(" ada@x.com ", "secret1")
        assert user_store.get_by_email(" ada@x.com") is None


class TestDashboard:
    def test_dashboard_returns_profile_and_activity(self, service):
        uid = service.register("Ada", "ada@x.com", "secret1")
        service.login("ada@x.com", "secret1")
        dashboard = service.dashboard(_claims(uid))
        assert dashboard.user.name == "Ada"
        assert [a.action for a in dashboard.activities] == [ACTION_LOGGED_IN, ACTION_REGISTERED]

    def test_dashboard_is_read_only(self, service, activity_store):
        uid = service.register("Ada", "ada@x.com", "secret1")
        service.dashboard(_claims(uid))
        service.dashboard(_claims(uid))
        assert len(activity_store.recent_for_user(uid)) == 1

    def test_vanished_user_is_not_found(self, service):
        with pytest.raises(NotFound):
            service.dashboard(_claims(31337))

    def test_dashboard_caps_activities(self, service):
        uid = service.register("Ada", "ada@x.com", "secret1")
        for i in range(30):
            service.log_activity(_claims(uid), f"viewed page {i}")
        dashboard = service.dashboard(_claims(uid))
        assert len(dashboard.activities) == 20
        assert dashboard.activities[0].action == "viewed page 29"


class TestLogActivity:
    def test_action_is_stripped_and_stored(self, service, activity_store):
        uid = service.register("Ada", "ada@x.com", "secret1")
        service.log_activity(_claims(uid), "  opened report  ")
        assert activity_store.recent_for_user(uid)[0].action == "opened report"

    @pytest.mark.parametrize("action", [None, "", "   ", "x" * 501])
    def test_invalid_action(self, service, action):
        uid = service.register("Ada", "ada@x.com", "secret1")
        with pytest.raises(InvalidInput):
            service.log_activity(_claims(uid), action)

    def test_vanished_user_is_not_found(self, service, engine):
        uid = service.register("Ada", "ada@x.com", "secret1")
        with engine.connect() as conn:
            conn.execute(activity_log.delete().where(activity_log.c.user_id == uid))
            conn.execute(users.delete().where(users.c.id == uid))
            conn.commit()
        with pytest.raises(NotFound):
            service.log_activity(_claims(uid), "after deletion")


def test_concurrent_duplicate_registration(service, user_store):
    """Two threads register the same email at once: one wins, one conflicts."""
    barrier = threading.Barrier(2)
    outcomes: list[object] = []
    lock = threading.Lock()

    def attempt(name: str) -> None:
        barrier.wait()
        try:
            result: object = service.register(name, "race@x.com", "secret1")
        except Conflict as exc:
            result = exc
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(n,)) for n in ("First", "Second")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(outcomes) == 2
    assert sum(isinstance(o, int) for o in outcomes) == 1
    assert sum(isinstance(o, Conflict) for o in outcomes) == 1
    assert user_store.count_by_email("race@x.com") == 1
