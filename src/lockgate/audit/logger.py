# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Offline audit logging with Ed25519 signatures and hash chaining."""
from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

_logger = logging.getLogger(__name__)

GENESIS = "GENESIS"


class AuditTrail:
    """Append-only log of security events.

    Every event is written to its own JSON file, signed with a device-local
    Ed25519 key and chained to the previous entry through a SHA3-512 hash,
    so that removing or editing an entry breaks verification.
    """

    def __init__(self, directory: os.PathLike[str] | str) -> None:
        self.directory = Path(directory).expanduser()
        self.key_path = self.directory / "signing_key.pem"
        self.chain_state_path = self.directory / "chain.state"
        self._lock = threading.Lock()
        self._private_key: Optional[Ed25519PrivateKey] = None

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _load_private_key(self) -> Ed25519PrivateKey:
        if self._private_key is not None:
            return self._private_key
        self._ensure_directory()
        if self.key_path.exists():
            key = serialization.load_pem_private_key(self.key_path.read_bytes(), password=None)
            if not isinstance(key, Ed25519PrivateKey):
                raise ValueError("audit signing key is not an Ed25519 key")
        else:
            key = Ed25519PrivateKey.generate()
            self.key_path.write_bytes(
                key.private_bytes(
                    encoding=serialization.Encoding.PEM,
                    format=serialization.PrivateFormat.PKCS8,
                    encryption_algorithm=serialization.NoEncryption(),
                )
            )
            os.chmod(self.key_path, 0o600)
        self._private_key = key
        return key

    def _load_prev_hash(self) -> str:
        try:
            return self.chain_state_path.read_text().strip() or GENESIS
        except FileNotFoundError:
            return GENESIS

    def record(self, event: str, *, details: Dict[str, Any] | None = None) -> Optional[Path]:
        """Append *event* to the trail and return the written file.

        Audit storage problems are logged and swallowed: the operation that
        produced the event must not fail because the trail is unwritable.
        """

        try:
            with self._lock:
                return self._write(event, details or {})
        except (OSError, ValueError) as exc:
            _logger.warning("Audit event %s not recorded: %s", event, exc)
            return None

    def _write(self, event: str, details: Dict[str, Any]) -> Path:
        timestamp = int(time.time())
        payload = {
            "event": event,
            "details": details,
            "timestamp": timestamp,
            "prev_hash": self._load_prev_hash(),
        }
        message = json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")
        signature = self._load_private_key().sign(message)
        chain_hash = hashlib.sha3_512(message + signature).hexdigest()
        entry = {
            "payload": payload,
            "signature": signature.hex(),
            "chain_hash": chain_hash,
        }
        file_path = self.directory / f"audit_{timestamp}_{uuid.uuid4().hex}.json"
        file_path.write_text(json.dumps(entry, ensure_ascii=False, indent=2))
        self.chain_state_path.write_text(chain_hash)
        _logger.debug("Audit event %s recorded", event)
        return file_path

    def verify(self, path: os.PathLike[str] | str) -> bool:
        data = json.loads(Path(path).read_text())
        payload = json.dumps(data["payload"], ensure_ascii=False, sort_keys=True).encode("utf-8")
        signature = bytes.fromhex(data.get("signature") or "")
        public_key = self._load_private_key().public_key()
        try:
            public_key.verify(signature, payload)
        except InvalidSignature:
            return False
        expected_chain_hash = hashlib.sha3_512(payload + signature).hexdigest()
        return expected_chain_hash == data.get("chain_hash")

    def verify_chain(self) -> bool:
        """Check every entry and that they form one unbroken chain.

        The chain must start at :data:`GENESIS`, end at the hash kept in
        ``chain.state`` and contain every entry file exactly once.
        """

        links: Dict[str, str] = {}
        paths = sorted(self.directory.glob("audit_*.json"))
        for path in paths:
            if not self.verify(path):
                _logger.warning("Audit entry %s failed verification", path.name)
                return False
            data = json.loads(path.read_text())
            prev_hash = data["payload"]["prev_hash"]
            if prev_hash in links:
                _logger.warning("Audit chain forks at %s", path.name)
                return False
            links[prev_hash] = data["chain_hash"]

        current = GENESIS
        for _ in paths:
            if current not in links:
                _logger.warning("Audit chain is broken after %s", current[:16])
                return False
            current = links[current]
        return current == self._load_prev_hash()


__all__ = ["AuditTrail", "GENESIS"]
