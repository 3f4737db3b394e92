"""
attestrank weights: the one boundary where caller-encoded edge weights
become doubles.

Attestation payloads carry weights as ABI-encoded uint256 values. Anything
up to ``2**64 - 1`` converts directly. Wider values are compressed on a
logarithmic curve that is continuous at the boundary and monotonic above
it, so a larger on-chain value never yields a smaller edge weight:

    weight = U64_MAX * (1 + log10(value / U64_MAX))

The largest uint256 therefore maps to roughly 58.8 * U64_MAX.
"""

from __future__ import annotations

import logging
import math
from typing import Union

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1
UINT256_BYTES = 32
DEFAULT_WEIGHT = 1.0

_LOG10_U64_MAX = math.log10(U64_MAX)


def weight_from_int(value: int, default: float = DEFAULT_WEIGHT) -> float:
    """Convert an unsigned integer weight to a double."""
    if value < 0:
        raise ValueError(f"Weight must be unsigned, got {value}")
    if value == 0:
        logger.debug("Zero weight, using default %s", default)
        return default
    if value > U64_MAX:
        scaled = U64_MAX * (1.0 + (math.log10(value) - _LOG10_U64_MAX))
        logger.warning("Large weight detected (%d), scaled to %.6g", value, scaled)
        return scaled
    return float(value)


def decode_weight(data: Union[bytes, bytearray], default: float = DEFAULT_WEIGHT) -> float:
    """Decode a big-endian uint256 weight from the head of an attestation payload."""
    if len(data) < UINT256_BYTES:
        logger.debug("Payload too short (%d bytes), using default weight %s", len(data), default)
        return default
    value = int.from_bytes(bytes(data[:UINT256_BYTES]), "big")
    return weight_from_int(value, default=default)


def decode_hex_weight(payload: str, default: float = DEFAULT_WEIGHT) -> float:
    """Decode a hex string payload (``0x`` optional)."""
    text = payload[2:] if payload.lower().startswith("0x") else payload
    return decode_weight(bytes.fromhex(text), default=default)
