import importlib
from pathlib import Path

ENV_KEYS = (
    "LOCKGATE_API_URL",
    "LOCKGATE_LOCK_TIMEOUT",
    "LOCKGATE_MAX_FAILED_UNLOCKS",
    "LOCKGATE_REQUEST_TIMEOUT",
    "LOCKGATE_DATA_DIR",
    "LOCKGATE_PIN_SHA256",
)


def reload_policy():
    policy_module = importlib.import_module("lockgate.security.policy")
    return importlib.reload(policy_module)


def test_policy_defaults(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    policy = reload_policy().load_policy()

    assert policy.lock_timeout == 60.0
    assert policy.max_failed_unlocks == 5
    assert policy.api_base_url.startswith("https://")
    assert policy.pinned_fingerprint is None


def test_policy_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("LOCKGATE_API_URL", "https://api.example.test")
    monkeypatch.setenv("LOCKGATE_LOCK_TIMEOUT", "120")
    monkeypatch.setenv("LOCKGATE_MAX_FAILED_UNLOCKS", "3")
    monkeypatch.setenv("LOCKGATE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("LOCKGATE_AUDIT_DIR", raising=False)

    policy = reload_policy().load_policy()

    assert policy.api_base_url == "https://api.example.test"
    assert policy.lock_timeout == 120.0
    assert policy.max_failed_unlocks == 3
    assert policy.data_dir == Path(tmp_path)
    assert policy.audit_dir == Path(tmp_path) / "audit"


def test_policy_ignores_malformed_values(monkeypatch):
    monkeypatch.setenv("LOCKGATE_LOCK_TIMEOUT", "soon")
    monkeypatch.setenv("LOCKGATE_MAX_FAILED_UNLOCKS", "-2")

    policy = reload_policy().load_policy()

    assert policy.lock_timeout == 60.0
    assert policy.max_failed_unlocks == 5
