#!/usr/bin/env python3
"""Score candidates against jobs from a YAML catalog.

Loads candidate profiles and job postings, rescores every active candidate
(or a single one) and prints each candidate's ranked matches.

Usage:
    python scripts/run_matching.py --catalog config/catalog.yaml
    python scripts/run_matching.py --candidate c-42 --limit 5
    python scripts/run_matching.py --reset

Environment variables:
    DATABASE_URL: Database connection string (optional, SQLite by default)
"""
import argparse
import logging
import sys

from scripts.bootstrap import get_session, init_db, settings
from src.persistence.database import drop_db
from src.logging_config import setup_logging
from src.matching.catalog import load_catalog
from src.matching.engine import MatchingEngine
from src.matching.exceptions import MatchingError
from src.persistence.match_repository import MatchRepository

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rescore candidate/job matches")
    parser.add_argument(
        "--catalog",
        default=str(settings.catalog_path),
        help="YAML file with 'candidates' and 'jobs' lists",
    )
    parser.add_argument("--candidate", help="Only rescore this candidate ID")
    parser.add_argument("--limit", type=int, default=20, help="Matches to print per candidate")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing match tables before rescoring",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level, settings.log_file)

    catalog = load_catalog(args.catalog)
    if args.reset:
        drop_db()
    init_db()

    if args.candidate:
        candidate_ids = [args.candidate]
    else:
        candidate_ids = [c.id for c in catalog.list_candidates()]

    with get_session() as session:
        engine = MatchingEngine(MatchRepository(session), catalog)

        for candidate_id in candidate_ids:
            summary = engine.rescore_candidate(candidate_id)
            if summary.failed:
                logger.warning("%d pair(s) not stored for %s", len(summary.failed), candidate_id)

            print(f"\n{candidate_id}")
            for match in engine.top_matches_for_candidate(candidate_id, limit=args.limit):
                details = match.match_details
                print(
                    f"  {match.match_score:3d}  {match.job_id:<20} "
                    f"[{match.status}] salary={details['salary_compatibility']} "
                    f"location={details['location_compatibility']}"
                )

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        sys.exit(1)
    except (MatchingError, OSError) as e:
        logger.error("Error: %s", e)
        sys.exit(1)
