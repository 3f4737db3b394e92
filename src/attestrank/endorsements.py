"""
attestrank endorsements: the (attester, recipient, weight) input records.

Records usually arrive already decoded from an attestation indexer. They may
also carry an Ed25519 signature by the attester; ``EndorsementSet`` can be
told to refuse anything unsigned or forged before the graph is built.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from nacl.encoding import HexEncoder
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from .accounts import AccountIdentity, account_from_public_key, to_account
from .graph import AttestationGraph
from .weights import DEFAULT_WEIGHT, decode_hex_weight

logger = logging.getLogger(__name__)


class Endorsement:
    """A claim: 'attester vouches for recipient with this weight'."""

    def __init__(self, attester: str, recipient: str, weight: float = DEFAULT_WEIGHT,
                 uid: Optional[str] = None, signature: Optional[str] = None,
                 public_key: Optional[str] = None):
        self.attester = to_account(attester)
        self.recipient = to_account(recipient)
        self.weight = float(weight)
        self.uid = uid
        self.signature = signature      # attester's signature (hex)
        self.public_key = public_key    # attester's verify key (hex)

    @property
    def claim_data(self) -> bytes:
        """Canonical bytes for signing."""
        claim = {
            "attester": self.attester,
            "recipient": self.recipient,
            "weight": self.weight,
            "uid": self.uid,
        }
        return json.dumps(claim, sort_keys=True, separators=(",", ":")).encode()

    @property
    def endorsement_id(self) -> str:
        return self.uid or hashlib.sha256(self.claim_data).hexdigest()[:16]

    @property
    def is_self_endorsement(self) -> bool:
        return self.attester == self.recipient

    def as_tuple(self) -> Tuple[str, str, float]:
        return self.attester, self.recipient, self.weight

    def sign(self, identity: AccountIdentity) -> "Endorsement":
        """Sign as the attester."""
        if identity.account != self.attester:
            raise ValueError(f"Signer {identity.account} != attester {self.attester}")
        self.signature = identity.sign(self.claim_data).hex()
        self.public_key = identity.public_key_hex
        return self

    def verify(self) -> bool:
        """Signature is valid and the key belongs to the attester."""
        if not self.signature or not self.public_key:
            return False
        try:
            vk = VerifyKey(self.public_key.encode(), encoder=HexEncoder)
            vk.verify(self.claim_data, bytes.fromhex(self.signature))
        except (BadSignatureError, ValueError):
            return False
        return account_from_public_key(bytes(vk)) == self.attester

    def to_dict(self) -> dict:
        return {
            "endorsement_id": self.endorsement_id,
            "attester": self.attester,
            "recipient": self.recipient,
            "weight": self.weight,
            "uid": self.uid,
            "signature": self.signature,
            "public_key": self.public_key,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Endorsement":
        """Deserialize. A hex ``data`` payload is decoded when ``weight`` is absent."""
        if "weight" in data and data["weight"] is not None:
            weight = float(data["weight"])
        elif data.get("data"):
            weight = decode_hex_weight(data["data"])
        else:
            weight = DEFAULT_WEIGHT
        return cls(
            attester=data["attester"],
            recipient=data["recipient"],
            weight=weight,
            uid=data.get("uid"),
            signature=data.get("signature"),
            public_key=data.get("public_key"),
        )

    def __eq__(self, other):
        if not isinstance(other, Endorsement):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Endorsement({self.attester} -> {self.recipient}: {self.weight})"


EndorsementLike = Union[Endorsement, Tuple[str, str, float]]


def build_graph(endorsements: Iterable[EndorsementLike]) -> AttestationGraph:
    """Build an AttestationGraph, preserving input order of parallel edges."""
    graph = AttestationGraph()
    for item in endorsements:
        if isinstance(item, Endorsement):
            attester, recipient, weight = item.as_tuple()
        else:
            attester, recipient, weight = item
        graph.add_edge(attester, recipient, weight)
    logger.info("Built attestation graph: %d nodes, %d edges", graph.num_nodes, graph.num_edges)
    return graph


class EndorsementSet:
    """Ordered collection of endorsements for one computation."""

    def __init__(self, require_signatures: bool = False):
        self.require_signatures = require_signatures
        self.endorsements: List[Endorsement] = []

    def add(self, endorsement: Endorsement) -> bool:
        """Add an endorsement. Returns False if it was rejected."""
        if self.require_signatures and not endorsement.verify():
            logger.warning("Rejected unsigned or invalid endorsement %s",
                           endorsement.endorsement_id)
            return False
        self.endorsements.append(endorsement)
        return True

    def extend(self, endorsements: Iterable[Endorsement]) -> int:
        """Add many. Returns how many were accepted."""
        return sum(1 for e in endorsements if self.add(e))

    def __len__(self) -> int:
        return len(self.endorsements)

    def __iter__(self) -> Iterator[Endorsement]:
        return iter(self.endorsements)

    def attesters(self) -> set:
        return {e.attester for e in self.endorsements}

    def recipients(self) -> set:
        return {e.recipient for e in self.endorsements}

    def to_graph(self) -> AttestationGraph:
        return build_graph(self.endorsements)

    def save(self, filepath: str):
        with open(filepath, "w") as f:
            json.dump([e.to_dict() for e in self.endorsements], f, indent=2)

    @classmethod
    def load(cls, filepath: str, require_signatures: bool = False) -> "EndorsementSet":
        """Load from a JSON list of endorsement dicts."""
        with open(filepath) as f:
            data = json.load(f)
        es = cls(require_signatures=require_signatures)
        es.extend(Endorsement.from_dict(item) for item in data)
        return es
