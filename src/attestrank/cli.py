#!/usr/bin/env python3
"""
attestrank CLI: score endorsement files and split reward pools offline.

Commands:
    keygen   - Create an account identity keyfile
    endorse  - Create a signed endorsement
    verify   - Verify a signed endorsement
    score    - Trust-aware PageRank scores for an endorsement file
    allocate - Scores plus integer points for a reward pool
"""

import argparse
import json
import sys
from typing import Optional


def _output(data: dict, args: argparse.Namespace, human_fn=None):
    """Output data as JSON or pretty-printed."""
    if getattr(args, 'json', False) or human_fn is None:
        print(json.dumps(data, indent=2, default=str))
    else:
        human_fn(data)


def _load_settings(args: argparse.Namespace):
    """Config file (or environment), then command-line overrides."""
    from attestrank.settings import EngineSettings

    if getattr(args, 'config', None):
        settings = EngineSettings.from_file(args.config)
    else:
        settings = EngineSettings.from_env()
    return settings.merged(
        total_pool=getattr(args, 'pool', None),
        trusted_seeds=args.seed or None,
        trust_multiplier=args.trust_multiplier,
        trust_boost=args.trust_boost,
        damping_factor=args.damping,
        max_iterations=args.max_iterations,
        tolerance=args.tolerance,
        min_score_threshold=getattr(args, 'min_threshold', None),
    )


def _load_endorsements(args: argparse.Namespace):
    from attestrank.endorsements import EndorsementSet
    return EndorsementSet.load(args.file, require_signatures=args.require_signatures)


# ─── Commands ──────────────────────────────────────────────────────

def cmd_keygen(args):
    """Create and save a new account identity."""
    from attestrank.accounts import AccountIdentity

    identity = AccountIdentity()
    identity.save(args.output)
    result = {"account": identity.account, "public_key": identity.public_key_hex,
              "keyfile": args.output}

    def human(d):
        print("✅ Identity created")
        print(f"   Account:  {d['account']}")
        print(f"   Keyfile:  {d['keyfile']}")

    _output(result, args, human)
    return result


def cmd_endorse(args):
    """Create a signed endorsement."""
    from attestrank.accounts import AccountIdentity
    from attestrank.endorsements import Endorsement

    identity = AccountIdentity.load(args.keyfile)
    endorsement = Endorsement(
        attester=identity.account,
        recipient=args.recipient,
        weight=args.weight,
        uid=args.uid,
    ).sign(identity)
    result = endorsement.to_dict()

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result, f, indent=2)

    def human(d):
        print("✅ Endorsement created")
        print(f"   ID:        {d['endorsement_id']}")
        print(f"   Attester:  {d['attester']}")
        print(f"   Recipient: {d['recipient']}")
        print(f"   Weight:    {d['weight']}")
        if args.output:
            print(f"   Saved to:  {args.output}")

    _output(result, args, human)
    return result


def cmd_verify(args):
    """Verify an endorsement from a JSON file or stdin."""
    from attestrank.endorsements import Endorsement

    if args.file == '-':
        data = json.load(sys.stdin)
    else:
        with open(args.file) as f:
            data = json.load(f)

    endorsement = Endorsement.from_dict(data)
    result = {
        "endorsement_id": endorsement.endorsement_id,
        "valid": endorsement.verify(),
        "attester": endorsement.attester,
        "recipient": endorsement.recipient,
        "weight": endorsement.weight,
    }

    def human(d):
        mark = "✅ VALID" if d['valid'] else "❌ INVALID"
        print(f"{mark}: {d['endorsement_id']}")
        print(f"   Attester:  {d['attester']}")
        print(f"   Recipient: {d['recipient']}")

    _output(result, args, human)
    return result


def cmd_score(args):
    """PageRank scores for an endorsement file."""
    from attestrank.endorsements import build_graph
    from attestrank.pagerank import calculate_pagerank

    settings = _load_settings(args)
    graph = build_graph(_load_endorsements(args))
    pr = calculate_pagerank(graph, settings.to_pagerank_config())

    ranked = pr.ranked()
    result = {
        "graph": graph.to_dict(),
        "iterations": pr.iterations,
        "converged": pr.converged,
        "trust_enabled": bool(settings.trusted_seeds),
        "scores": dict(ranked[:args.top] if args.top else ranked),
    }

    def human(d):
        g = d['graph']
        print(f"📊 {g['nodes']} accounts, {g['edges']} endorsements")
        state = "converged" if d['converged'] else "stopped"
        print(f"   {state} after {d['iterations']} iterations")
        for i, (account, score) in enumerate(d['scores'].items(), 1):
            print(f"   {i:>3}. {account}  {score:.6f}")

    _output(result, args, human)
    return result


def cmd_allocate(args):
    """Split a reward pool across an endorsement file."""
    settings = _load_settings(args)
    source = settings.to_reward_source()
    dist = source.compute(_load_endorsements(args))

    result = {
        "source": source.metadata(),
        "iterations": dist.iterations,
        "converged": dist.converged,
        "allocation": dist.allocation.to_dict(),
    }

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result, f, indent=2)

    def human(d):
        a = d['allocation']
        print(f"💰 {source.name}: {a['distributed']} of {a['pool']} points "
              f"to {len(a['points'])} accounts")
        for account, amount in a['points'].items():
            score = dist.scores.get(account, 0.0)
            print(f"   {account}  {amount}  (score {score:.6f})")
        if args.output:
            print(f"   Saved to: {args.output}")

    _output(result, args, human)
    return result


# ─── Parser ────────────────────────────────────────────────────────

def _add_engine_args(p: argparse.ArgumentParser):
    p.add_argument("file", help="Endorsements JSON file")
    p.add_argument("-c", "--config", help="Engine settings JSON file")
    p.add_argument("-s", "--seed", action="append", default=[],
                   help="Trusted seed account (repeatable)")
    p.add_argument("--trust-multiplier", type=float, help="Weight multiplier for seed edges")
    p.add_argument("--trust-boost", type=float, help="Teleportation share reserved for seeds")
    p.add_argument("--damping", type=float, help="Damping factor")
    p.add_argument("--max-iterations", type=int, help="Iteration cap")
    p.add_argument("--tolerance", type=float, help="Convergence tolerance")
    p.add_argument("--require-signatures", action="store_true",
                   help="Drop endorsements without a valid attester signature")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attestrank",
        description="attestrank: trust-aware PageRank reward allocation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument("--log-json", action="store_true", help="Structured JSON logs")

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # keygen
    p = sub.add_parser("keygen", help="Create an account identity")
    p.add_argument("-o", "--output", required=True, help="Keyfile to write")

    # endorse
    p = sub.add_parser("endorse", help="Create a signed endorsement")
    p.add_argument("recipient", help="Recipient account")
    p.add_argument("-k", "--keyfile", required=True, help="Attester identity keyfile")
    p.add_argument("-w", "--weight", type=float, default=1.0, help="Endorsement weight")
    p.add_argument("-u", "--uid", help="Attestation UID")
    p.add_argument("-o", "--output", help="Save endorsement to file")

    # verify
    p = sub.add_parser("verify", help="Verify a signed endorsement")
    p.add_argument("file", help="Endorsement JSON file (- for stdin)")

    # score
    p = sub.add_parser("score", help="Compute PageRank scores")
    _add_engine_args(p)
    p.add_argument("-t", "--top", type=int, default=0, help="Only show the top N accounts")

    # allocate
    p = sub.add_parser("allocate", help="Allocate a reward pool")
    _add_engine_args(p)
    p.add_argument("-p", "--pool", type=int, help="Total pool (integer token units)")
    p.add_argument("-m", "--min-threshold", type=float, help="Minimum score to receive points")
    p.add_argument("-o", "--output", help="Save allocation to file")

    return parser


def main(argv: Optional[list] = None) -> Optional[dict]:
    """CLI entry point. Returns result dict for testing."""
    from attestrank.logs import setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level, json_format=args.log_json)

    commands = {
        "keygen": cmd_keygen,
        "endorse": cmd_endorse,
        "verify": cmd_verify,
        "score": cmd_score,
        "allocate": cmd_allocate,
    }

    try:
        return commands[args.command](args)
    except FileNotFoundError as e:
        print(f"❌ File not found: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
