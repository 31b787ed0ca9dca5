#!/usr/bin/env python3
"""
Index rebuild utility.

Repairs drift between the attribute store and the vector index, or
re-embeds every record of a kind from its stored attributes (for example
after changing EMBED_MODEL_NAME).
"""

import argparse
import sys

from jobmatch.core.config import validate_config
from jobmatch.core.db import Database
from jobmatch.core.drift_rules import detect_drift, reconcile
from jobmatch.core.match_engine import MatchEngine
from jobmatch.core.schema import EntityKind


def main():
    parser = argparse.ArgumentParser(
        description="Repair or rebuild the vector index from the attribute store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --check                 # Report drift only
  %(prog)s                         # Repair drift from stored embeddings
  %(prog)s --reembed --kind profile   # Recompute profile embeddings

Environment variables:
- DB_PATH (default ./data/jobmatch.db)
- EMBED_PROVIDER=sentence_transformer|hash (used by --reembed)
        """
    )
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in EntityKind],
        help="Only process one kind (default: both)"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report drift without changing anything"
    )
    parser.add_argument(
        "--reembed",
        action="store_true",
        help="Recompute embeddings with the configured provider"
    )
    parser.add_argument("--db-path", help="Override DB_PATH")
    args = parser.parse_args()

    issues = validate_config()
    if issues:
        print(f"ERROR: Invalid configuration: {issues}")
        sys.exit(1)

    kinds = [EntityKind(args.kind)] if args.kind else list(EntityKind)

    if args.reembed:
        with MatchEngine.from_config(args.db_path) as engine:
            for kind in kinds:
                count = engine.reembed_all(kind)
                print(f"✓ Re-embedded {count} {kind.value} records")
        return

    drift_found = False
    with Database(args.db_path) as db:
        for kind in kinds:
            if args.check:
                findings = detect_drift(db, kind)
                print(f"{kind.value}: {len(findings)} drift findings")
                for finding in findings:
                    print(f"  - [{finding.severity}] {finding.type} id={finding.record_id}")
                drift_found = drift_found or bool(findings)
            else:
                plans = reconcile(db, kind)
                print(f"✓ {kind.value}: applied {len(plans)} corrections")

    if drift_found:
        sys.exit(2)


if __name__ == "__main__":
    main()
