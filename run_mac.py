"""Compute one MAC from the command line.

Usage:
  python run_mac.py hmac -o digest:sha256 -o hexkey:000102 --data "hello"
  python run_mac.py cmac -o cipher:aes-128-cbc -o hexkey:2b7e1516... --in message.bin
  python run_mac.py --list

Options are applied in order, so select the digest or cipher before the key.
Without --in or --data the message is read from stdin.
"""
import sys
import argparse
import logging

from algorithms import load_builtin_algorithms
from config import CHUNK_SIZE, LOG_FORMAT, LOG_LEVEL
from core.api import context_create
from core.controls import split_option
from core.crypto_utils import bytes_to_hex
from core.errors import MacError
from reporting.batch import feed_chunks

log = logging.getLogger("run_mac")


def read_message(args) -> bytes:
    if args.data is not None:
        return args.data.encode("utf-8")
    if args.infile is not None:
        with open(args.infile, "rb") as f:
            return f.read()
    return sys.stdin.buffer.read()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description='Compute a MAC over a message.')
    p.add_argument('algorithm', nargs='?', help='Algorithm name, numeric id or OID')
    p.add_argument('-o', '--option', dest='options', action='append', default=[],
                   metavar='TYPE:VALUE', help='Control in string form, e.g. hexkey:0011 (repeatable)')
    source = p.add_mutually_exclusive_group()
    source.add_argument('--in', dest='infile', help='Read the message from this file')
    source.add_argument('--data', help='Use this text (UTF-8) as the message')
    p.add_argument('--chunk-size', type=int, default=CHUNK_SIZE,
                   help='Feed the message in chunks of this many bytes (0 = single update)')
    p.add_argument('--binary', action='store_true', help='Write the raw tag instead of hex')
    p.add_argument('--list', action='store_true', help='List the available algorithms and exit')
    p.add_argument('--log-level', default=LOG_LEVEL)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)
    registry = load_builtin_algorithms()

    if args.list:
        for d in registry:
            print(f"{d.name:<12} {d.mac_id:>5}  {d.oid or '-':<26} {d.description}")
        return 0
    if not args.algorithm:
        log.error("no algorithm given (see --list)")
        return 2

    try:
        controls = [split_option(o) for o in args.options]
        message = read_message(args)
        with context_create(args.algorithm, *controls, registry=registry) as ctx:
            ctx.init()
            feed_chunks(ctx, message, args.chunk_size)
            tag = ctx.finalize()
    except MacError as exc:
        log.error("%s: %s", type(exc).__name__, exc)
        return 1
    except OSError as exc:
        log.error("cannot read message: %s", exc)
        return 1

    if args.binary:
        sys.stdout.buffer.write(tag)
        sys.stdout.buffer.flush()
    else:
        print(bytes_to_hex(tag))
    return 0


if __name__ == '__main__':
    sys.exit(main())
