"""
Task master authorization tool.

Usage:
    taskauth nonce
    taskauth domain --contract <task_manager_addr>
    taskauth sign-screening --contract <addr> --participant <proxy_addr> --task-id <id> [--nonce N]
    taskauth sign-reward --contract <addr> --participant <proxy_addr> --reward-id <id> [--nonce N]
    taskauth verify-screening --contract <addr> --participant <addr> --task-id <id> --nonce N --signature 0x.. --signer <addr>
    taskauth verify-reward --contract <addr> --participant <addr> --reward-id <id> --nonce N --signature 0x.. --signer <addr>
    taskauth status --contract <addr> [--participant <addr>]

Results are printed to stdout as JSON; progress goes to stderr.
Configuration comes from the environment or .env (see taskauth.config).
"""

import argparse
import json
import sys

from .config import load_settings
from .context import TaskContext
from .eip712 import domain_dict, domain_separator
from .errors import TaskAuthError
from .nonce import random_nonce
from .package import create_reward_claim_signature_package, create_screening_signature_package
from .util import eprint, to_hex
from .verifier import verify_reward_claim, verify_screening


def _emit(obj):
    print(json.dumps(obj, indent=2))


def _nonce_arg(value):
    return int(value, 0)


def _context(args):
    settings = load_settings(args.env_file)
    overrides = {}
    if getattr(args, "contract", None):
        overrides["contract_address"] = args.contract
    if getattr(args, "chain_id", None) is not None:
        overrides["chain_id"] = args.chain_id
    if getattr(args, "rpc_url", None):
        overrides["rpc_url"] = args.rpc_url
    return TaskContext(settings._replace(**overrides))

# ============================================================
#  Commands
# ============================================================

def cmd_nonce(args):
    _emit({"nonce": str(random_nonce())})


def cmd_domain(args):
    with _context(args) as ctx:
        domain = ctx.domain
        out = domain_dict(domain)
        out["separator"] = to_hex(domain_separator(domain))
        _emit(out)


def cmd_sign_screening(args):
    with _context(args) as ctx:
        eprint(f"Signing ScreeningRequest as {ctx.signer.address}")
        package = create_screening_signature_package(
            ctx.signer, ctx.domain, args.participant, args.task_id, args.nonce)
        eprint(f"  valid = {package.is_valid}")
        _emit(package.to_dict())
        if not package.is_valid:
            sys.exit(1)


def cmd_sign_reward(args):
    with _context(args) as ctx:
        eprint(f"Signing RewardClaimRequest as {ctx.signer.address}")
        package = create_reward_claim_signature_package(
            ctx.signer, ctx.domain, args.participant, args.reward_id, args.nonce)
        eprint(f"  valid = {package.is_valid}")
        _emit(package.to_dict())
        if not package.is_valid:
            sys.exit(1)


def cmd_verify_screening(args):
    with _context(args) as ctx:
        ok = verify_screening(
            ctx.domain, args.participant, args.task_id, args.nonce, args.signature, args.signer)
        _emit({"valid": ok})
        if not ok:
            sys.exit(1)


def cmd_verify_reward(args):
    with _context(args) as ctx:
        ok = verify_reward_claim(
            ctx.domain, args.participant, args.reward_id, args.nonce, args.signature, args.signer)
        _emit({"valid": ok})
        if not ok:
            sys.exit(1)


def cmd_status(args):
    with _context(args) as ctx:
        reader = ctx.reader
        eprint(f"Reading TaskManager {reader.contract_address} via {reader.rpc_url}")
        out = reader.summary()
        if args.participant:
            out["participant"] = {
                "address": args.participant,
                "screened": reader.is_screened(args.participant),
                "rewarded": reader.is_rewarded(args.participant),
            }
        _emit(out)

# ============================================================
#  Main
# ============================================================

def build_parser():
    parser = argparse.ArgumentParser(description="TaskManager screening / reward authorization tool")
    parser.add_argument("--env-file", default=None, help="Path to .env (default ./.env)")
    sub = parser.add_subparsers(dest="command")

    def with_domain(p):
        p.add_argument("--contract", help="TaskManager contract address")
        p.add_argument("--chain-id", type=int, help="Chain id (default from config)")
        return p

    sub.add_parser("nonce", help="Print a fresh 256-bit nonce")
    with_domain(sub.add_parser("domain", help="Print the EIP-712 domain and separator"))

    p_ss = with_domain(sub.add_parser("sign-screening", help="Sign a ScreeningRequest"))
    p_ss.add_argument("--participant", required=True, help="Participant proxy address")
    p_ss.add_argument("--task-id", required=True)
    p_ss.add_argument("--nonce", type=_nonce_arg, help="Nonce (default: random)")

    p_sr = with_domain(sub.add_parser("sign-reward", help="Sign a RewardClaimRequest"))
    p_sr.add_argument("--participant", required=True, help="Participant proxy address")
    p_sr.add_argument("--reward-id", required=True)
    p_sr.add_argument("--nonce", type=_nonce_arg, help="Nonce (default: random)")

    for name, id_flag in (("verify-screening", "--task-id"), ("verify-reward", "--reward-id")):
        p = with_domain(sub.add_parser(name, help=f"Check a {name.split('-')[1]} signature"))
        p.add_argument("--participant", required=True)
        p.add_argument(id_flag, required=True)
        p.add_argument("--nonce", type=_nonce_arg, required=True)
        p.add_argument("--signature", required=True, help="0x-prefixed 65-byte signature")
        p.add_argument("--signer", required=True, help="Expected task master address")

    p_st = with_domain(sub.add_parser("status", help="Read TaskManager state over JSON-RPC"))
    p_st.add_argument("--rpc-url", help="Ledger RPC URL (default from config)")
    p_st.add_argument("--participant", help="Also report this participant proxy")

    return parser


COMMANDS = {
    "nonce": cmd_nonce,
    "domain": cmd_domain,
    "sign-screening": cmd_sign_screening,
    "sign-reward": cmd_sign_reward,
    "verify-screening": cmd_verify_screening,
    "verify-reward": cmd_verify_reward,
    "status": cmd_status,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)
    try:
        command(args)
    except (TaskAuthError, ValueError) as e:
        eprint(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
