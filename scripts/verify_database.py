#!/usr/bin/env python
"""
Database verification script.

Checks performed:
1. Basic statistics (counts)
2. Foreign key integrity
3. Duplicate reviews and watchlist entries
4. Aggregate rating consistency (average_rating / total_reviews)

Usage:
    # Full verification
    python scripts/verify_database.py

    # Recompute any stale movie aggregates
    python scripts/verify_database.py --fix
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func

from filmscape.api import config
from filmscape.core.aggregation import find_stale_movies, recompute_all_movie_ratings
from filmscape.database import get_db_manager, crud
from filmscape.database.models import Movie, Review, User, WatchlistEntry
from filmscape.utils.logging_config import configure_script_logging


def print_section(title):
    """Print a formatted section header."""
    print(f"\n{'='*60}")
    print(f"{title}")
    print('='*60)


def check_basic_stats(session):
    """Print row counts."""
    print_section("1. Database Statistics")

    print(f"\nDatabase contents:")
    print(f"  Users:     {crud.get_user_count(session):,}")
    print(f"  Movies:    {crud.get_movie_count(session):,}")
    print(f"  Reviews:   {crud.get_review_count(session):,}")
    print(f"  Watchlist: {session.query(WatchlistEntry).count():,}")
    return True


def check_foreign_keys(session):
    """Check for reviews pointing at missing users or movies."""
    print_section("2. Foreign Key Integrity")

    orphaned_users = session.query(Review).outerjoin(
        User, Review.user_id == User.id
    ).filter(User.id.is_(None)).count()
    orphaned_movies = session.query(Review).outerjoin(
        Movie, Review.movie_id == Movie.id
    ).filter(Movie.id.is_(None)).count()

    print(f"\nReviews with invalid user_id:  {orphaned_users}")
    print(f"Reviews with invalid movie_id: {orphaned_movies}")

    passed = orphaned_users == 0 and orphaned_movies == 0
    print("\n[SUCCESS] All foreign keys are valid" if passed else "\n[ERROR] Found orphaned reviews!")
    return passed


def _duplicate_pairs(session, model):
    return session.query(
        model.user_id, model.movie_id, func.count('*')
    ).group_by(model.user_id, model.movie_id).having(func.count('*') > 1).all()


def check_duplicates(session):
    """Check for duplicate (user_id, movie_id) pairs."""
    print_section("3. Duplicate Check")

    passed = True
    for label, model in (("reviews", Review), ("watchlist entries", WatchlistEntry)):
        duplicates = _duplicate_pairs(session, model)
        print(f"\nDuplicate {label}: {len(duplicates)}")
        for user_id, movie_id, count in duplicates[:10]:
            print(f"  User {user_id}, Movie {movie_id}: {count} times")
        passed = passed and not duplicates
    return passed


def check_aggregates(session, fix=False):
    """Compare stored movie aggregates with the review table."""
    print_section("4. Aggregate Ratings")

    stale = find_stale_movies(session)
    print(f"\nMovies with stale aggregates: {len(stale)}")
    for row in stale[:10]:
        print(
            f"  Movie {row['movie_id']}: stored {row['stored_average']} / {row['stored_total']}, "
            f"expected {row['expected_average']} / {row['expected_total']}"
        )

    if stale and fix:
        repaired = recompute_all_movie_ratings(session)
        print(f"\n[FIXED] Recomputed aggregates for {repaired} movies")
        return True

    if not stale:
        print("[SUCCESS] All aggregates match their reviews")
    return not stale


def run_full_verification(db_path, fix=False):
    """Run all verification checks."""
    print("="*60)
    print("Database Verification")
    print("="*60)

    db_manager = get_db_manager(db_path=db_path)
    session = db_manager.get_session()

    try:
        results = {
            'basic_stats': check_basic_stats(session),
            'foreign_keys': check_foreign_keys(session),
            'duplicates': check_duplicates(session),
            'aggregates': check_aggregates(session, fix=fix),
        }

        print_section("Verification Summary")
        passed = sum(1 for v in results.values() if v)
        print(f"\nChecks passed: {passed}/{len(results)}")
        for check_name, result in results.items():
            status = "[PASS]" if result else "[FAIL]"
            print(f"  {status} {check_name.replace('_', ' ').title()}")

        all_passed = all(results.values())
        if not all_passed:
            print("\n[ERROR] Some verification checks FAILED!")
            if not results['aggregates']:
                print("Run with --fix to recompute stale aggregates.")
        print("="*60)
        return all_passed

    finally:
        session.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Verify Filmscape database integrity")
    parser.add_argument(
        '--fix',
        action='store_true',
        help='Recompute stale movie aggregates'
    )
    parser.add_argument(
        '--db-path',
        type=str,
        default=config.get_database_path(),
        help='Path to SQLite database file or database URL'
    )
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    args = parser.parse_args()
    configure_script_logging(debug=args.debug)

    success = run_full_verification(args.db_path, fix=args.fix)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
