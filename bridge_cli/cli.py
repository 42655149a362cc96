"""Operator CLI for querying the bridge from a shell."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Mapping, Optional

from bridge_client.client import BridgeClient
from bridge_core.config import BridgeSettings
from bridge_core.errors import BridgeError, ConfirmationTimeoutError
from bridge_core.models import Deployed
from confirmation.policy import PollingPolicy

EXIT_TIMEOUT = 3


def main(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="bridge-cli")
    parser.add_argument("--network", help="Preset name or JSON-RPC URL (STARKNET_NETWORK).")
    parser.add_argument("--kakarot-address", help="Core contract address (KAKAROT_ADDRESS).")
    parser.add_argument(
        "--proxy-class-hash", help="Proxy account class hash (PROXY_ACCOUNT_CLASS_HASH)."
    )
    parser.add_argument("--log-level", default="WARNING")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, handler in (("nonce", _nonce), ("balance", _balance), ("code", _code)):
        sub = subparsers.add_parser(name)
        sub.add_argument("address")
        sub.add_argument("--block", default="latest")
        sub.set_defaults(handler=handler)

    resolve_parser = subparsers.add_parser("resolve")
    resolve_parser.add_argument("address")
    resolve_parser.add_argument("--block", default="latest")
    resolve_parser.set_defaults(handler=_resolve)

    storage_parser = subparsers.add_parser("storage")
    storage_parser.add_argument("address")
    storage_parser.add_argument("slot")
    storage_parser.add_argument("--block", default="latest")
    storage_parser.set_defaults(handler=_storage)

    call_parser = subparsers.add_parser("call")
    call_parser.add_argument("address")
    call_parser.add_argument("calldata")
    call_parser.add_argument("--block", default="latest")
    call_parser.add_argument("--value", default="0")
    call_parser.set_defaults(handler=_call)

    send_parser = subparsers.add_parser("send")
    send_parser.add_argument("raw_transaction")
    send_parser.add_argument("--wait", action="store_true")
    _add_polling_args(send_parser)
    send_parser.set_defaults(handler=_send)

    receipt_parser = subparsers.add_parser("receipt")
    receipt_parser.add_argument("transaction_hash")
    _add_polling_args(receipt_parser)
    receipt_parser.set_defaults(handler=_receipt)

    block_parser = subparsers.add_parser("block-number")
    block_parser.set_defaults(handler=_block_number)

    chain_parser = subparsers.add_parser("chain-id")
    chain_parser.set_defaults(handler=_chain_id)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), stream=sys.stderr)

    try:
        client = _build_client(args, os.environ if environ is None else environ)
        output = asyncio.run(_run(client, args))
    except ConfirmationTimeoutError as exc:
        print(
            json.dumps(
                {
                    "transactionHash": exc.transaction_hash,
                    "status": "unknown",
                    "lastState": exc.last_state,
                },
                indent=2,
            )
        )
        return EXIT_TIMEOUT
    except (BridgeError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(output, indent=2))
    return 0


def _build_client(args: argparse.Namespace, environ: Mapping[str, str]) -> BridgeClient:
    values = dict(environ)
    if args.network:
        values["STARKNET_NETWORK"] = args.network
    if args.kakarot_address:
        values["KAKAROT_ADDRESS"] = args.kakarot_address
    if args.proxy_class_hash:
        values["PROXY_ACCOUNT_CLASS_HASH"] = args.proxy_class_hash
    settings = BridgeSettings.from_env(values)
    return BridgeClient(settings.to_configuration())


async def _run(client: BridgeClient, args: argparse.Namespace) -> object:
    async with client:
        return await args.handler(client, args)


async def _resolve(client: BridgeClient, args: argparse.Namespace) -> object:
    result = await client.resolve(args.address, args.block)
    if isinstance(result, Deployed):
        return {"deployed": True, "starknetAddress": hex(result.starknet_address)}
    return {"deployed": False, "starknetAddress": None}


async def _nonce(client: BridgeClient, args: argparse.Namespace) -> object:
    return hex(await client.nonce(args.address, args.block))


async def _balance(client: BridgeClient, args: argparse.Namespace) -> object:
    return hex(await client.balance(args.address, args.block))


async def _code(client: BridgeClient, args: argparse.Namespace) -> object:
    return "0x" + (await client.get_code(args.address, args.block)).hex()


async def _storage(client: BridgeClient, args: argparse.Namespace) -> object:
    value = await client.storage_at(args.address, _parse_int(args.slot), args.block)
    return "0x" + value.to_bytes(32, "big").hex()


async def _call(client: BridgeClient, args: argparse.Namespace) -> object:
    result = await client.call(
        args.address, args.calldata, args.block, value=_parse_int(args.value)
    )
    return "0x" + result.hex()


async def _send(client: BridgeClient, args: argparse.Namespace) -> object:
    handle = await client.send_transaction(args.raw_transaction)
    if not args.wait:
        return {"transactionHash": handle.hex_hash, "sender": handle.sender}
    receipt = await client.transaction_receipt(handle, _build_policy(args))
    return receipt.to_dict()


async def _receipt(client: BridgeClient, args: argparse.Namespace) -> object:
    receipt = await client.transaction_receipt(args.transaction_hash, _build_policy(args))
    return receipt.to_dict()


async def _block_number(client: BridgeClient, args: argparse.Namespace) -> object:
    return hex(await client.block_number())


async def _chain_id(client: BridgeClient, args: argparse.Namespace) -> object:
    return hex(await client.chain_id())


def _add_polling_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--interval", type=float, default=1.0)
    parser.add_argument("--max-attempts", type=int, default=60)
    parser.add_argument("--timeout", type=float, default=120.0)


def _build_policy(args: argparse.Namespace) -> PollingPolicy:
    return PollingPolicy(
        interval=args.interval,
        max_attempts=args.max_attempts,
        max_interval=max(args.interval, 10.0),
        timeout=args.timeout,
    )


def _parse_int(value: str) -> int:
    text = value.strip()
    return int(text, 16) if text.lower().startswith("0x") else int(text)


if __name__ == "__main__":
    raise SystemExit(main())
