import pytest
from hypothesis import given, strategies as st

from lockgate.state import (
    AuthFailure,
    AuthRequestState,
    Clear,
    ErrorKind,
    Fulfilled,
    Lock,
    LockStatus,
    Logout,
    Pending,
    PersistedSnapshot,
    RecordFailedUnlock,
    Rehydrate,
    Rejected,
    SessionState,
    Touch,
    Unlock,
    UserSession,
    reduce,
)

USER = UserSession(id="1", name="A", email="a@b.com", token="t1")
FAILURE = AuthFailure(ErrorKind.AUTH, "nope")

_text = st.text(min_size=1, max_size=8)
sessions = st.one_of(
    st.just(UserSession.EMPTY),
    st.builds(UserSession, id=_text, name=_text, email=_text, token=_text),
)
lock_statuses = st.builds(
    LockStatus,
    locked=st.booleans(),
    last_active_at=st.floats(min_value=0, max_value=1e9, allow_nan=False),
    failed_unlock_attempts=st.integers(min_value=0, max_value=20),
)
auth_states = st.one_of(
    st.just(AuthRequestState()),
    st.just(AuthRequestState(pending=True)),
    st.builds(
        AuthRequestState,
        error=st.builds(AuthFailure, kind=st.sampled_from(ErrorKind), message=_text),
    ),
)
states = st.builds(SessionState, session=sessions, lock=lock_statuses, auth=auth_states)


def signed_in(at=100.0):
    return reduce(SessionState.initial(0.0), Fulfilled(USER, at=at))


def test_session_is_all_or_nothing():
    with pytest.raises(ValueError):
        UserSession(id="1", name="A", email=None, token="t")


def test_session_repr_masks_token():
    assert "t1" not in repr(USER)


def test_from_payload_accepts_backend_identifier():
    session = UserSession.from_payload({"_id": 7, "name": "A", "email": "a@b.com", "token": "t"})

    assert session.id == "7"


def test_from_payload_rejects_partial_body():
    with pytest.raises(ValueError):
        UserSession.from_payload({"id": "1", "name": "A", "email": "a@b.com"})


def test_pending_clears_previous_error():
    state = reduce(SessionState(), Rejected(FAILURE))

    state = reduce(state, Pending())

    assert state.auth == AuthRequestState(pending=True)


def test_fulfilled_resets_lockout():
    state = SessionState(lock=LockStatus(locked=True, failed_unlock_attempts=5))

    state = reduce(state, Fulfilled(USER, at=42.0))

    assert state.session == USER
    assert state.lock == LockStatus(locked=False, last_active_at=42.0, failed_unlock_attempts=0)
    assert state.auth == AuthRequestState()


def test_fulfilled_requires_authenticated_session():
    with pytest.raises(ValueError):
        reduce(SessionState(), Fulfilled(UserSession.EMPTY, at=1.0))


def test_lock_keeps_session_and_is_idempotent():
    state = reduce(signed_in(), Lock("manual"))

    assert state.lock.locked
    assert state.session == USER
    assert reduce(state, Lock("background")) is state


def test_unlock_resets_attempts():
    state = reduce(reduce(signed_in(), Lock()), RecordFailedUnlock(threshold=5))

    state = reduce(state, Unlock(at=200.0))

    assert state.lock == LockStatus(locked=False, last_active_at=200.0, failed_unlock_attempts=0)


def test_unlock_without_session_is_ignored():
    state = SessionState(lock=LockStatus(locked=True, failed_unlock_attempts=5))

    assert reduce(state, Unlock(at=1.0)) is state


def test_failed_unlock_below_threshold_keeps_session():
    state = reduce(signed_in(), RecordFailedUnlock(threshold=3))

    assert state.lock.locked
    assert state.lock.failed_unlock_attempts == 1
    assert state.session == USER


def test_failed_unlock_at_threshold_empties_session():
    state = signed_in()
    for _ in range(3):
        state = reduce(state, RecordFailedUnlock(threshold=3))

    assert state.lock.locked
    assert state.lock.failed_unlock_attempts == 3
    assert state.session == UserSession.EMPTY


def test_touch_moves_forward_only_while_unlocked():
    state = signed_in(at=100.0)

    assert reduce(state, Touch(at=50.0)) is state
    assert reduce(state, Touch(at=150.0)).lock.last_active_at == 150.0

    locked = reduce(state, Lock())
    assert reduce(locked, Touch(at=500.0)) is locked


def test_rehydrate_replaces_state_and_idles_auth():
    snapshot = PersistedSnapshot(session=USER, lock=LockStatus(locked=True, last_active_at=9.0))
    state = SessionState(auth=AuthRequestState(pending=True))

    state = reduce(state, Rehydrate(snapshot))

    assert state.snapshot() == snapshot
    assert state.auth == AuthRequestState()


def test_unknown_action_raises():
    with pytest.raises(TypeError):
        reduce(SessionState(), object())


def test_snapshot_rejects_unknown_version():
    data = signed_in().snapshot().to_dict()
    data["version"] = 99

    with pytest.raises(ValueError):
        PersistedSnapshot.from_dict(data)


def test_snapshot_rejects_partial_session():
    data = signed_in().snapshot().to_dict()
    data["session"]["token"] = None

    with pytest.raises(ValueError):
        PersistedSnapshot.from_dict(data)


@given(states)
def test_logout_always_empties_session_and_clears_error(state):
    result = reduce(state, Logout())

    assert result.session == UserSession.EMPTY
    assert result.auth == AuthRequestState()
    assert result.lock == state.lock


@given(states)
def test_clear_is_idempotent(state):
    once = reduce(state, Clear())

    assert once.auth.error is None
    assert reduce(once, Clear()) is once


@given(states)
def test_snapshot_survives_serialisation(state):
    snapshot = state.snapshot()

    assert PersistedSnapshot.from_dict(snapshot.to_dict()) == snapshot


@given(states, st.integers(min_value=1, max_value=10))
def test_lockout_never_leaves_a_session(state, threshold):
    result = reduce(state, RecordFailedUnlock(threshold=threshold))

    assert result.lock.locked
    if result.lock.failed_unlock_attempts >= threshold:
        assert not result.session.is_authenticated
