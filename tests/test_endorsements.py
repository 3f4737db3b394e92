"""Tests for endorsement records, signing and graph building."""
import json

import pytest

from attestrank.accounts import AccountIdentity
from attestrank.endorsements import Endorsement, EndorsementSet, build_graph
from attestrank.errors import InvalidAccountError
from attestrank.graph import Edge

from conftest import addr

A, B, C = addr(1), addr(2), addr(3)


@pytest.fixture
def alice():
    return AccountIdentity()


@pytest.fixture
def signed(alice):
    return Endorsement(alice.account, B, 5.0, uid="0x01").sign(alice)


class TestEndorsement:
    def test_accounts_canonicalized(self):
        e = Endorsement("0x" + "AA" * 20, "bb" * 20, 2)
        assert e.attester == "0x" + "aa" * 20
        assert e.recipient == "0x" + "bb" * 20
        assert e.weight == 2.0

    def test_invalid_account(self):
        with pytest.raises(InvalidAccountError):
            Endorsement("bob", B)

    def test_self_endorsement_flag(self):
        assert Endorsement(A, A).is_self_endorsement
        assert not Endorsement(A, B).is_self_endorsement

    def test_sign_and_verify(self, signed):
        assert signed.verify()
        assert signed.signature is not None

    def test_unsigned_fails_verification(self):
        assert not Endorsement(A, B).verify()

    def test_tampered_weight_fails(self, signed):
        signed.weight = 500.0
        assert not signed.verify()

    def test_wrong_signer_rejected(self, alice):
        with pytest.raises(ValueError):
            Endorsement(A, B).sign(alice)

    def test_foreign_key_fails(self, alice):
        # Valid signature over the claim, but the key does not own the attester account.
        mallory = AccountIdentity()
        forged = Endorsement(alice.account, B, 5.0)
        forged.signature = mallory.sign(forged.claim_data).hex()
        forged.public_key = mallory.public_key_hex
        assert not forged.verify()

    def test_garbage_signature_fails(self, signed):
        signed.signature = "zz"
        assert not signed.verify()

    def test_dict_roundtrip_keeps_signature(self, signed):
        restored = Endorsement.from_dict(json.loads(json.dumps(signed.to_dict())))
        assert restored == signed
        assert restored.verify()

    def test_from_dict_decodes_payload(self):
        data = {"attester": A, "recipient": B, "data": "0x" + (250).to_bytes(32, "big").hex()}
        assert Endorsement.from_dict(data).weight == 250.0

    def test_from_dict_default_weight(self):
        assert Endorsement.from_dict({"attester": A, "recipient": B}).weight == 1.0

    def test_endorsement_id_prefers_uid(self, signed):
        assert signed.endorsement_id == "0x01"
        assert len(Endorsement(A, B).endorsement_id) == 16


class TestBuildGraph:
    def test_from_tuples(self):
        g = build_graph([(A, B, 1.0), (A, B, 2.0), (B, C, 1.0)])
        assert g.outgoing(A) == [Edge(B, 1.0), Edge(B, 2.0)]
        assert g.num_nodes == 3

    def test_from_endorsements(self):
        g = build_graph([Endorsement(A, B, 3.0), Endorsement(C, C, 9.0)])
        assert g.nodes == {A, B, C}
        assert g.self_loop_nodes() == [C]

    def test_empty(self):
        assert build_graph([]).num_nodes == 0


class TestEndorsementSet:
    def test_require_signatures(self, signed):
        es = EndorsementSet(require_signatures=True)
        assert es.add(signed)
        assert not es.add(Endorsement(A, B))
        assert len(es) == 1

    def test_accepts_unsigned_by_default(self):
        es = EndorsementSet()
        assert es.extend([Endorsement(A, B), Endorsement(B, C)]) == 2
        assert es.attesters() == {A, B}
        assert es.recipients() == {B, C}

    def test_save_load(self, tmp_path, signed):
        es = EndorsementSet()
        es.extend([signed, Endorsement(B, C, 2.0)])
        path = str(tmp_path / "endorsements.json")
        es.save(path)

        loaded = EndorsementSet.load(path)
        assert [e.as_tuple() for e in loaded] == [e.as_tuple() for e in es]

        strict = EndorsementSet.load(path, require_signatures=True)
        assert len(strict) == 1

    def test_to_graph(self):
        es = EndorsementSet()
        es.add(Endorsement(A, B))
        assert es.to_graph().nodes == {A, B}


class TestAccountIdentity:
    def test_account_is_20_bytes(self, alice):
        assert alice.account.startswith("0x")
        assert len(alice.account) == 42

    def test_save_load(self, tmp_path, alice):
        path = str(tmp_path / "keys" / "alice.json")
        alice.save(path)
        loaded = AccountIdentity.load(path)
        assert loaded.account == alice.account
        assert loaded.public_key_hex == alice.public_key_hex
