#!/usr/bin/env python3
"""
Resolve top-level requirements against a JSON package index and explain why
every resolved package is there.

Writes one CSV row per resolved distribution (name, version, depth, chain)
plus, with --debug, a JSON file with the structured chains.

Usage:
  python -m depchain.run --index index.json --requirement "flask>=2" --output-dir output [--debug]
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

from packaging.requirements import InvalidRequirement
from resolvelib import ResolutionError
from tqdm import tqdm

from depchain.diagnostics import explain_resolution, format_derivation_chain
from depchain.entrypoint import ExplainRunner
from depchain.loader import IndexLoadError, load_index


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Resolve requirements and explain why each package was selected."
    )
    ap.add_argument("--index", required=True, help="JSON package index file")
    ap.add_argument(
        "--requirement",
        "-r",
        action="append",
        required=True,
        help="Top-level requirement (PEP 508); repeat for several",
    )
    ap.add_argument("--max-rounds", type=int, default=100, help="Max resolution rounds (resolvelib)")
    ap.add_argument("--output-dir", default="output", help="Output directory for chains.csv")
    ap.add_argument("--debug", action="store_true", help="Debug logging and chains.json output")
    return ap.parse_args(argv)


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        index = load_index(args.index)
    except IndexLoadError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2
    print(f"[load] {len(index):,} packages from {args.index!r}")

    runner = ExplainRunner(index)
    try:
        graph = runner.resolve(args.requirement, max_rounds=args.max_rounds)
    except InvalidRequirement as e:
        print(f"[error] bad requirement: {e}", file=sys.stderr)
        return 2
    except ResolutionError as e:
        print(f"[error] resolution failed: {e!r}", file=sys.stderr)
        return 1
    print(f"[resolve] {len(graph) - 1:,} distributions selected")

    os.makedirs(args.output_dir, exist_ok=True)
    csv_path = os.path.join(args.output_dir, "chains.csv")

    num_direct = 0
    num_transitive = 0
    num_unexplained = 0
    records: List[Dict[str, Any]] = []

    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["name", "version", "depth", "chain"])

        for dist, chain in tqdm(explain_resolution(graph), total=len(graph) - 1, desc="Explain"):
            if chain is None:
                writer.writerow([dist.name, str(dist.version), "", ""])
                num_unexplained += 1
                continue

            writer.writerow([dist.name, str(dist.version), len(chain) + 1, str(chain)])
            if chain.is_empty():
                num_direct += 1
            else:
                num_transitive += 1

            if args.debug:
                records.append(
                    {
                        "name": dist.name,
                        "version": str(dist.version),
                        "chain": [{"name": s.name, "version": str(s.version)} for s in chain],
                        "reason": format_derivation_chain(dist.name, dist.version, chain),
                    }
                )

    print(f"[output] Wrote {csv_path}")

    if args.debug:
        json_path = os.path.join(args.output_dir, "chains.json")
        with open(json_path, "w") as jf:
            json.dump(records, jf, indent=2)
        print(f"[debug] Wrote {json_path}")

    print("\n--- Final stats ---")
    print(f"  Total distributions:       {num_direct + num_transitive + num_unexplained:,}")
    print(f"  Direct requirements:       {num_direct:,}")
    print(f"  Transitive:                {num_transitive:,}")
    print(f"  Not connected to root:     {num_unexplained:,}")
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
