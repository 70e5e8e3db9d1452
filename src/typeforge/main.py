#!/usr/bin/env python3
"""typeforge: generate type-specialized C containers.

Usage: python typeforge.py <description.json> [-o DIR] [--sources K] [--threshold N]
"""

import argparse
import json
import logging
import os
import sys

from .config import build_module, load_description
from .errors import ConfigurationError


def main(argv=None):
    argparser = argparse.ArgumentParser(description="typeforge C container generator")
    argparser.add_argument("description", help="JSON module description")
    argparser.add_argument("-o", "--output", default=".",
                           help="Output directory (default: current directory)")
    argparser.add_argument("--sources", type=int,
                           help="Number of source files to generate (default: derived from size)")
    argparser.add_argument("--threshold", type=int,
                           help="Approximate size of a generated source file in characters")
    argparser.add_argument("--list", action="store_true",
                           help="Print the names of the artifacts without writing them")
    argparser.add_argument("-v", "--verbose", action="store_true", help="Log distribution details")

    args = argparser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s", stream=sys.stderr)

    try:
        description = load_description(args.description)
    except FileNotFoundError:
        print(f"error: file '{args.description}' not found", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"error: {args.description}:{e.lineno}:{e.colno}: {e.msg}", file=sys.stderr)
        sys.exit(1)

    try:
        module = build_module(description, source_count=args.sources,
                              source_threshold=args.threshold)
        if args.list:
            for artifact in module.artifacts():
                print(artifact.file_name)
            return
        os.makedirs(args.output, exist_ok=True)
        paths = module.render(args.output)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Generated {module.name}: {', '.join(paths)}")


if __name__ == "__main__":
    main()
