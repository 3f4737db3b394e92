"""
attestrank accounts: 20-byte account identifiers and signing identities.

Accounts are kept in one canonical text form (lowercase ``0x`` + 40 hex
chars). The width is fixed, so sorting canonical strings sorts by bytes.
"""

from __future__ import annotations

import hashlib
import json
import os
import re
from datetime import datetime, timezone
from typing import Optional, Union

from nacl.encoding import HexEncoder
from nacl.signing import SigningKey

from .errors import InvalidAccountError

ACCOUNT_BYTES = 20

_HEX_RE = re.compile(r"^[0-9a-f]{40}$")


def to_account(value: Union[str, bytes]) -> str:
    """Return the canonical form of an account identifier."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ACCOUNT_BYTES:
            raise InvalidAccountError(
                f"Account must be {ACCOUNT_BYTES} bytes, got {len(value)}"
            )
        return "0x" + bytes(value).hex()
    if not isinstance(value, str):
        raise InvalidAccountError(f"Unsupported account type: {type(value).__name__}")
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not _HEX_RE.match(text):
        raise InvalidAccountError(f"Invalid account identifier: {value!r}")
    return "0x" + text


def is_account(value) -> bool:
    try:
        to_account(value)
    except InvalidAccountError:
        return False
    return True


def account_from_public_key(public_key: bytes) -> str:
    """Derive an account from an Ed25519 verify key (last 20 bytes of SHA-256)."""
    return to_account(hashlib.sha256(public_key).digest()[-ACCOUNT_BYTES:])


# ─── Identity ──────────────────────────────────────────────────────

class AccountIdentity:
    """Ed25519 keypair that owns an account and signs endorsements."""

    def __init__(self, signing_key: Optional[SigningKey] = None):
        self.signing_key = signing_key or SigningKey.generate()
        self.verify_key = self.signing_key.verify_key

    @property
    def account(self) -> str:
        return account_from_public_key(bytes(self.verify_key))

    @property
    def public_key_hex(self) -> str:
        return self.verify_key.encode(encoder=HexEncoder).decode()

    def sign(self, data: bytes) -> bytes:
        return self.signing_key.sign(data).signature

    def export_keys(self) -> dict:
        """Export keypair for storage."""
        return {
            "account": self.account,
            "public_key": self.public_key_hex,
            "private_key": self.signing_key.encode(encoder=HexEncoder).decode(),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

    @classmethod
    def from_private_key(cls, hex_key: str) -> "AccountIdentity":
        sk = SigningKey(hex_key.encode(), encoder=HexEncoder)
        return cls(signing_key=sk)

    @classmethod
    def load(cls, filepath: str) -> "AccountIdentity":
        """Load identity from a JSON keyfile."""
        with open(filepath) as f:
            data = json.load(f)
        return cls.from_private_key(data["private_key"])

    def save(self, filepath: str):
        """Save identity to a JSON keyfile readable only by the owner."""
        os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
        with open(filepath, "w") as f:
            json.dump(self.export_keys(), f, indent=2)
        os.chmod(filepath, 0o600)

    def __repr__(self):
        return f"AccountIdentity({self.account})"
