import asyncio
import json

from conftest import LOGIN_RESPONSE, StubTransport

from lockgate.auth import AUTH_ERROR_MESSAGE, LOGIN_ENDPOINT, SECURITY_ERROR_MESSAGE, AuthController
from lockgate.state import ErrorKind, UserSession
from lockgate.transport import NetworkOrProtocolFailure, TransportError, TrustVerificationFailure


def audit_events(audit):
    return sorted(
        json.loads(path.read_text())["payload"]["event"]
        for path in audit.directory.glob("audit_*.json")
    )


def test_successful_login_populates_session(store, clock, audit):
    transport = StubTransport(LOGIN_RESPONSE)
    auth = AuthController(store, transport, audit=audit, clock=clock)
    observed = []
    store.subscribe(
        lambda state, seq: observed.append(
            (state.auth.pending, state.auth.error, state.session.is_authenticated)
        )
    )

    asyncio.run(auth.login("a@b.com", "x"))

    assert transport.calls == [(LOGIN_ENDPOINT, {"email": "a@b.com", "password": "x"})]
    assert observed == [(True, None, False), (False, None, True)]
    assert store.session == UserSession(id="1", name="A", email="a@b.com", token="t1")
    assert not store.is_locked
    assert store.lock_status.last_active_at == clock.now
    assert audit_events(audit) == ["auth.login.success"]


def test_rejected_credentials_keep_session_empty(store, audit):
    transport = StubTransport(NetworkOrProtocolFailure("HTTP 401", status_code=401))
    auth = AuthController(store, transport, audit=audit)

    asyncio.run(auth.login("a@b.com", "wrong"))

    assert store.session == UserSession.EMPTY
    assert not store.auth_request.pending
    assert store.auth_request.error.kind is ErrorKind.AUTH
    assert store.auth_request.error.message == AUTH_ERROR_MESSAGE
    assert audit_events(audit) == ["auth.login.failure"]


def test_trust_failure_is_a_security_error(store, audit):
    transport = StubTransport(TrustVerificationFailure("self signed certificate"))
    auth = AuthController(store, transport, audit=audit)

    asyncio.run(auth.login("a@b.com", "x"))

    assert store.session == UserSession.EMPTY
    assert store.auth_request.error.kind is ErrorKind.SECURITY
    assert store.auth_request.error.message == SECURITY_ERROR_MESSAGE
    assert audit_events(audit) == ["auth.login.security"]


def test_marker_in_message_is_a_security_error(store):
    transport = StubTransport(TransportError("Certificate validation failed upstream"))
    auth = AuthController(store, transport)

    asyncio.run(auth.login("a@b.com", "x"))

    assert store.auth_request.error.kind is ErrorKind.SECURITY


def test_marker_in_server_reason_is_an_auth_error(store):
    failure = NetworkOrProtocolFailure("HTTP 495: Certificate validation failed", status_code=495)
    auth = AuthController(store, StubTransport(failure))

    asyncio.run(auth.login("a@b.com", "x"))

    assert store.auth_request.error.kind is ErrorKind.AUTH


def test_incomplete_response_is_an_auth_error(store):
    transport = StubTransport({"id": "1", "name": "A", "email": "a@b.com"})
    auth = AuthController(store, transport)

    asyncio.run(auth.login("a@b.com", "x"))

    assert store.session == UserSession.EMPTY
    assert store.auth_request.error.kind is ErrorKind.AUTH


def test_invalid_input_never_reaches_the_network(store):
    transport = StubTransport()
    auth = AuthController(store, transport)

    asyncio.run(auth.login("not-an-email", ""))

    assert transport.calls == []
    assert store.auth_request.error.kind is ErrorKind.AUTH


def test_new_attempt_clears_previous_error(store):
    transport = StubTransport(NetworkOrProtocolFailure("HTTP 500", status_code=500), LOGIN_RESPONSE)
    auth = AuthController(store, transport)

    asyncio.run(auth.login("a@b.com", "x"))
    asyncio.run(auth.login("a@b.com", "x"))

    assert store.auth_request.error is None
    assert store.is_authenticated


def test_stale_response_is_dropped(store):
    transport = StubTransport()
    auth = AuthController(store, transport)
    other = {"id": "2", "name": "B", "email": "b@b.com", "token": "t2"}

    async def scenario():
        gate = asyncio.Event()
        transport.queue(LOGIN_RESPONSE, gate)
        transport.queue(other)
        first = asyncio.ensure_future(auth.login("a@b.com", "x"))
        await asyncio.sleep(0)
        await auth.login("b@b.com", "y")
        gate.set()
        await first

    asyncio.run(scenario())

    assert store.session.id == "2"
    assert not store.auth_request.pending


def test_duplicate_login_in_flight_is_ignored(store):
    transport = StubTransport()
    auth = AuthController(store, transport)

    async def scenario():
        gate = asyncio.Event()
        transport.queue(LOGIN_RESPONSE, gate)
        first = asyncio.ensure_future(auth.login("a@b.com", "x"))
        await asyncio.sleep(0)
        assert auth.in_flight
        await auth.login(" a@b.com ", "x")
        gate.set()
        await first

    asyncio.run(scenario())

    assert len(transport.calls) == 1
    assert store.is_authenticated
    assert not auth.in_flight


def test_logout_clears_session_and_error(store, audit):
    transport = StubTransport(LOGIN_RESPONSE)
    auth = AuthController(store, transport, audit=audit)
    asyncio.run(auth.login("a@b.com", "x"))

    auth.logout()

    assert store.session == UserSession.EMPTY
    assert store.auth_request.error is None
    assert audit_events(audit) == ["auth.login.success", "auth.logout"]


def test_logout_discards_request_in_flight(store):
    transport = StubTransport()
    auth = AuthController(store, transport)

    async def scenario():
        gate = asyncio.Event()
        transport.queue(LOGIN_RESPONSE, gate)
        pending = asyncio.ensure_future(auth.login("a@b.com", "x"))
        await asyncio.sleep(0)
        auth.logout()
        gate.set()
        await pending

    asyncio.run(scenario())

    assert not store.is_authenticated
    assert not store.auth_request.pending


def test_clear_error_dismisses_failure(store):
    auth = AuthController(store, StubTransport())
    asyncio.run(auth.login("", ""))

    auth.clear_error()

    assert store.auth_request.error is None
