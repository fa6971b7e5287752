"""
ethrecords Command Line

Usage:
    ethrecords keygen [--output FILE]
    ethrecords address (--key HEX | --keyfile FILE)
    ethrecords decode KIND HEX|-          # RLP hex -> JSON
    ethrecords decode KIND --from-json TEXT|-   # JSON -> RLP hex
    ethrecords sign --to ADDR --nonce N --value V [--gas G] [--gas-price P] [--data HEX]
    ethrecords sender RAW_TX_HEX

Global options select the chain id (--chain-id N, --legacy) and load a
JSON configuration file (--config FILE).
"""

import argparse
import logging
import sys
from typing import List, Optional

from ethrecords import __version__
from ethrecords.config import Config, setup_logging
from ethrecords.core.block import Block
from ethrecords.core.header import Header
from ethrecords.core.receipt import Log, Receipt
from ethrecords.core.transaction import Transaction
from ethrecords.core.types import Address, strip_hex_prefix
from ethrecords.crypto.secp256k1 import PrivateKey
from ethrecords.errors import EthRecordsError, InvalidParameterError
from ethrecords.protocol.signer import recover_sender, sign_transaction

logger = logging.getLogger(__name__)

RECORD_KINDS = {
    "header": Header,
    "block": Block,
    "transaction": Transaction,
    "receipt": Receipt,
    "log": Log,
}

DEFAULT_GAS = 21000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ethrecords",
        description="Ethereum record codec and transaction signer",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", metavar="FILE", help="JSON configuration file")
    parser.add_argument("--chain-id", type=int, metavar="N", help="EIP-155 chain id")
    parser.add_argument("--legacy", action="store_true", help="Use the pre-EIP-155 signer")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # keygen
    keygen_parser = subparsers.add_parser("keygen", help="Generate a private key")
    keygen_parser.add_argument("--output", "-o", help="Write the key hex to FILE")

    # address
    address_parser = subparsers.add_parser("address", help="Address of a private key")
    _add_key_arguments(address_parser)

    # decode
    decode_parser = subparsers.add_parser("decode", help="Convert a record between RLP and JSON")
    decode_parser.add_argument("kind", choices=sorted(RECORD_KINDS))
    decode_parser.add_argument("data", help="RLP hex or JSON text, '-' reads stdin")
    decode_parser.add_argument("--from-json", action="store_true", help="Input is JSON, output RLP hex")

    # sign
    sign_parser = subparsers.add_parser("sign", help="Create and sign a transaction")
    sign_parser.add_argument("--to", help="Recipient address, omit for contract creation")
    sign_parser.add_argument("--nonce", type=int, required=True)
    sign_parser.add_argument("--value", type=int, default=0)
    sign_parser.add_argument("--gas", type=int, default=DEFAULT_GAS)
    sign_parser.add_argument("--gas-price", type=int, default=1)
    sign_parser.add_argument("--data", default="0x", help="Payload hex")
    sign_parser.add_argument("--json", action="store_true", help="Print JSON instead of raw hex")
    _add_key_arguments(sign_parser)

    # sender
    sender_parser = subparsers.add_parser("sender", help="Recover the sender of a raw transaction")
    sender_parser.add_argument("raw", help="Signed transaction RLP hex, '-' reads stdin")

    return parser


def _add_key_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--key", help="Private key hex")
    group.add_argument("--keyfile", help="File holding the private key hex")


def _read_input(value: str) -> str:
    if value == "-":
        return sys.stdin.read().strip()
    return value.strip()


def _decode_hex(value: str, name: str) -> bytes:
    try:
        return bytes.fromhex(strip_hex_prefix(value))
    except ValueError as e:
        raise InvalidParameterError(name, f"invalid hex: {e}") from e


def _resolve_chain_id(args: argparse.Namespace, config: Config) -> Optional[int]:
    if args.legacy:
        return None
    if args.chain_id is not None:
        return args.chain_id
    return config.chain_id


def _load_key(args: argparse.Namespace, config: Config) -> PrivateKey:
    if args.key:
        return PrivateKey.from_hex(args.key)
    keyfile = args.keyfile or config.keyfile
    if not keyfile:
        raise InvalidParameterError("key", "pass --key or --keyfile, or set keyfile in the configuration")
    with open(keyfile, "r") as f:
        return PrivateKey.from_hex(f.read())


# ==============================================================================
# Commands
# ==============================================================================

def cmd_keygen(args: argparse.Namespace, config: Config) -> int:
    key = PrivateKey.generate()
    if args.output:
        with open(args.output, "w") as f:
            f.write(key.hex() + "\n")
        logger.info(f"Private key written to {args.output}")
    else:
        print(key.hex())
    print(key.address().checksum_hex())
    return 0


def cmd_address(args: argparse.Namespace, config: Config) -> int:
    print(_load_key(args, config).address().checksum_hex())
    return 0


def cmd_decode(args: argparse.Namespace, config: Config) -> int:
    record_cls = RECORD_KINDS[args.kind]
    text = _read_input(args.data)
    if args.from_json:
        record = record_cls.decode_json(text)
        print("0x" + record.encode_rlp().hex())
    else:
        record = record_cls.decode_rlp(_decode_hex(text, "data"))
        print(record.encode_json(config.codec.json_indent, config.codec.json_sort_keys))
    return 0


def cmd_sign(args: argparse.Namespace, config: Config) -> int:
    chain_id = _resolve_chain_id(args, config)
    key = _load_key(args, config)
    tx = Transaction.create(
        nonce=args.nonce,
        to=Address.from_hex(args.to) if args.to else None,
        value=args.value,
        gas=args.gas,
        gas_price=args.gas_price,
        data=_decode_hex(args.data, "data"),
    )
    signed = sign_transaction(tx, key, chain_id)
    logger.debug(f"Signed {signed!r} for chain id {chain_id}")
    if args.json:
        print(signed.encode_json(config.codec.json_indent, config.codec.json_sort_keys))
    else:
        print("0x" + signed.encode_rlp().hex())
    return 0


def cmd_sender(args: argparse.Namespace, config: Config) -> int:
    chain_id = _resolve_chain_id(args, config)
    tx = Transaction.decode_rlp(_decode_hex(_read_input(args.raw), "raw"))
    print(recover_sender(tx, chain_id).checksum_hex())
    return 0


COMMANDS = {
    "keygen": cmd_keygen,
    "address": cmd_address,
    "decode": cmd_decode,
    "sign": cmd_sign,
    "sender": cmd_sender,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    try:
        config = Config.load(args.config) if args.config else Config()
    except (OSError, EthRecordsError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        config.log.level = args.log_level
    setup_logging(config.log)

    try:
        return COMMANDS[args.command](args, config)
    except EthRecordsError as e:
        logger.debug(f"{args.command} failed: {e.to_dict()}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
