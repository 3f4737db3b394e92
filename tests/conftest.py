"""Shared fixtures: accounts and graphs used across test modules."""
import os
import sys

import pytest

# Ensure src is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from attestrank.graph import AttestationGraph  # noqa: E402


def addr(n: int) -> str:
    """Deterministic 20-byte account: 0x0101...01 for n=1."""
    return "0x" + f"{n:02x}" * 20


ALICE = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
BOB = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
CHARLIE = "0x90f79bf6eb2c4f870365e785982e1f101e93b906"
DIANA = "0x15d34aaf54267db7d7c367839aaf71a00a2c6a65"
GRACE = "0x14dc79964da2c08b23698b3d3cc7ca32193d9955"
HENRY = "0x23618e81e3f5cdf7f54c3d65f7fbc0abf5b21e8f"
IVY = "0xa0ee7a142d267c1f36714e4a8f75612f20a79720"


@pytest.fixture
def cycle_graph():
    """A -> B -> C -> A with equal weights."""
    g = AttestationGraph()
    g.add_edge(addr(1), addr(2), 1.0)
    g.add_edge(addr(2), addr(3), 1.0)
    g.add_edge(addr(3), addr(1), 1.0)
    return g


@pytest.fixture
def complex_graph():
    """Five accounts, weighted edges, several cycles."""
    g = AttestationGraph()
    g.add_edge(addr(1), addr(2), 1.0)
    g.add_edge(addr(1), addr(3), 2.0)
    g.add_edge(addr(2), addr(3), 1.5)
    g.add_edge(addr(2), addr(4), 1.0)
    g.add_edge(addr(3), addr(4), 2.0)
    g.add_edge(addr(4), addr(5), 1.0)
    g.add_edge(addr(5), addr(1), 1.5)
    g.add_edge(addr(3), addr(1), 1.0)
    return g


def build_spam_graph(self_loop_weight: float = 100.0) -> AttestationGraph:
    """Alice (authority) vouches into a community; three spammers self-vouch."""
    g = AttestationGraph()
    g.add_edge(ALICE, BOB, 95.0)
    g.add_edge(GRACE, GRACE, self_loop_weight)
    g.add_edge(HENRY, HENRY, self_loop_weight)
    g.add_edge(IVY, IVY, self_loop_weight)
    g.add_edge(BOB, CHARLIE, 70.0)
    g.add_edge(CHARLIE, DIANA, 65.0)
    g.add_edge(DIANA, BOB, 40.0)
    return g


@pytest.fixture
def spam_graph():
    return build_spam_graph()
