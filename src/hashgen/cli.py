"""Command line front end for the hash engine.

Usage:
    hashgen hash sha256 "some text"
    hashgen bulk md5 --input words.txt
    hashgen detect '$2b$10$...'
    hashgen strength 'hunter2'
    hashgen salt --length 22
    hashgen algorithms
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, List, Optional

from . import config
from .engine import HashEngine
from .errors import HashEngineError
from .models import OUTPUT_FORMATS, HashOptions


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def _add_option_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--salt", default=None)
    parser.add_argument(
        "--random-salt",
        type=int,
        default=None,
        metavar="LENGTH",
        help="Generate a salt of LENGTH characters instead of passing one",
    )
    parser.add_argument("--iterations", type=int, default=None)
    parser.add_argument("--cost-factor", type=int, default=None)
    parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, default="hex")
    parser.add_argument("--uppercase", action="store_true")


def _options_from_args(engine: HashEngine, args: argparse.Namespace) -> HashOptions:
    salt = args.salt
    if args.random_salt:
        salt = engine.generate_salt(args.random_salt)
    return HashOptions.from_mapping(
        {
            "salt": salt,
            "iterations": args.iterations,
            "cost_factor": args.cost_factor,
            "output_format": args.output_format,
            "uppercase": args.uppercase,
        }
    )


def _read_items(path: Optional[str]) -> List[str]:
    if path and path != "-":
        with open(path, "r", encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    else:
        lines = sys.stdin.read().splitlines()
    return [line for line in lines if line.strip()]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hashgen", description=f"{config.APP_NAME} {config.APP_VERSION}")
    sub = p.add_subparsers(dest="command", required=True)

    hash_cmd = sub.add_parser("hash", help="Hash a single value")
    hash_cmd.add_argument("algorithm")
    hash_cmd.add_argument("text")
    _add_option_flags(hash_cmd)

    bulk_cmd = sub.add_parser("bulk", help="Hash one value per line from a file or stdin")
    bulk_cmd.add_argument("algorithm")
    bulk_cmd.add_argument("--input", default="-", help="File to read, '-' for stdin")
    bulk_cmd.add_argument("--workers", type=int, default=None)
    bulk_cmd.add_argument("--batch-size", type=int, default=None)
    _add_option_flags(bulk_cmd)

    detect_cmd = sub.add_parser("detect", help="Guess the algorithm behind a hash string")
    detect_cmd.add_argument("value")
    detect_cmd.add_argument("--hint", default=None, help="Family or algorithm id to prefer")
    detect_cmd.add_argument("--all", action="store_true", help="List every matching family")

    strength_cmd = sub.add_parser("strength", help="Score a password")
    strength_cmd.add_argument("password")

    salt_cmd = sub.add_parser("salt", help="Generate a random salt")
    salt_cmd.add_argument("--length", type=int, default=16)

    sub.add_parser("algorithms", help="List supported algorithms by category")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "bulk":
        engine = HashEngine(workers=args.workers, batch_size=args.batch_size)
    else:
        engine = HashEngine()

    try:
        with engine:
            if args.command == "hash":
                options = _options_from_args(engine, args)
                digest = engine.generate_hash_sync(args.text, args.algorithm, options)
                _emit({"algorithm": args.algorithm, "hash": digest, "options": options.to_dict()})
            elif args.command == "bulk":
                options = _options_from_args(engine, args)
                items = _read_items(args.input)
                digests = engine.generate_bulk_hashes(items, args.algorithm, options).result()
                _emit([{"text": text, "hash": digest} for text, digest in zip(items, digests)])
            elif args.command == "detect":
                if args.all:
                    _emit([match.to_dict() for match in engine.detector.candidates(args.value)])
                else:
                    _emit(engine.detect_hash_type(args.value, args.hint).to_dict())
            elif args.command == "strength":
                _emit(engine.evaluate_password_strength(args.password).to_dict())
            elif args.command == "salt":
                _emit({"salt": engine.generate_salt(args.length)})
            elif args.command == "algorithms":
                _emit(
                    {
                        category: [
                            {
                                "id": descriptor.id,
                                "name": descriptor.name,
                                "supportsSalt": descriptor.supports_salt,
                                "approximation": descriptor.approximation,
                            }
                            for descriptor in descriptors
                        ]
                        for category, descriptors in engine.algorithms_by_category().items()
                    }
                )
    except (HashEngineError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
