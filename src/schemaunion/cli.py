"""schemaunion CLI: inspect generated unions and decode inputs against them."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Optional


def _print_union(description, quiet: bool) -> None:
    if quiet:
        return
    print(f"{description.name}  ({len(description.variants)} variants, first match wins)")
    for index, variant in enumerate(description.variants, start=1):
        print(f"  {index}. {variant.tag} -> {variant.type_name}")
        print(f"     required: {', '.join(variant.required_fields) or '-'}")
        print(f"     optional: {', '.join(variant.optional_fields) or '-'}")
    for first, second in description.overlapping:
        print(f"  [WARN] {first} shadows {second} for inputs both accept")


def main():
    """Main CLI entry point for schemaunion commands."""
    try:
        schemaunion_version = get_version("schemaunion")
    except PackageNotFoundError:
        schemaunion_version = "dev"

    parser = argparse.ArgumentParser(
        prog="schemaunion",
        description="schemaunion: JSON Schema oneOf unions with structural dispatch"
    )
    parser.add_argument("--version", action="version", version=f"schemaunion {schemaunion_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "schema",
        type=Path,
        help="Path to the JSON schema document"
    )
    parent_parser.add_argument(
        "--pointer",
        default="",
        help="JSON pointer to the oneOf node (default: document root)"
    )
    parent_parser.add_argument(
        "--name",
        default=None,
        help="Field name the union is generated for"
    )
    parent_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a generation config JSON file"
    )
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log generation and dispatch decisions."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    describe_parser = subparsers.add_parser(
        "describe",
        help="Show the variants, tags and fingerprints of a union",
        parents=[parent_parser]
    )
    describe_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write union.json to this directory instead of printing a table"
    )

    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode one JSON object against a union",
        parents=[parent_parser]
    )
    decode_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to a JSON file holding one object"
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Decode a JSON array of objects and summarize the tags",
        parents=[parent_parser]
    )
    check_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to a JSON file holding an array of objects"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Lazy import: only import the kernel when a command runs
    from .api import generate_union, describe_union, build_decode_report, check
    from .kernel.errors import GenerationError
    from ._internal.canonical_json import canonical_dumps
    from ._internal.io.schema_files import load_config_from_path, load_json_from_path

    try:
        config = load_config_from_path(args.config) if args.config else None
        union = generate_union(
            args.schema.resolve(),
            name=args.name,
            pointer=args.pointer,
            config=config,
        )
    except GenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (OSError, ValueError) as e:
        # Unreadable files, bad JSON, invalid config
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.command == "describe":
        description = describe_union(union)
        output_dir: Optional[Path] = args.output_dir
        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)
            out_path = output_dir / "union.json"
            out_path.write_text(canonical_dumps(description.model_dump()) + "\n", encoding="utf-8")
            if not args.quiet:
                print("[OK] Union described")
                print(f"  Report: {out_path}")
        else:
            _print_union(description, args.quiet)
        return

    try:
        data = load_json_from_path(args.input)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read input {args.input}: {e}", file=sys.stderr)
        sys.exit(2)

    if args.command == "decode":
        if not isinstance(data, dict):
            print("Error: decode input must be a JSON object", file=sys.stderr)
            sys.exit(2)
        report = build_decode_report(union.from_value(data))
        if not args.quiet:
            print(canonical_dumps(report.model_dump(), indent=2))
        if not report.ok:
            sys.exit(1)
        return

    if args.command == "check":
        if not isinstance(data, list):
            print("Error: check input must be a JSON array", file=sys.stderr)
            sys.exit(2)
        summary = check(union, data)
        if not args.quiet:
            status = "OK" if summary.ok else "FAILED"
            print(f"[{status}] Checked {summary.total} items against {summary.union}")
            print(f"  Matched: {summary.matched}")
            print(f"  No match: {summary.no_match}")
            print(f"  Decode errors: {summary.decode_errors}")
            for tag, count in summary.tag_counts.items():
                print(f"  {tag}: {count}")
            for index, failure in zip(summary.failure_indices, summary.failures):
                print(f"  [{index}] {failure.code} keys={failure.keys}")
        if not summary.ok:
            sys.exit(1)
        return


if __name__ == "__main__":
    main()
