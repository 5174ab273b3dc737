"""CLI script to load demo organizations, users and projects into the backend DB.
Usage: python scripts/seed_demo.py [--file data.json]
"""
import sys
import argparse
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `volunteer_api` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from volunteer_api.database import engine, create_db_and_tables
from volunteer_api.seed import seed_demo_data, load_seed_file


def main(path: Optional[pathlib.Path] = None):
    """Create tables if needed and insert the demo data set (or `path`)."""
    create_db_and_tables()
    data = load_seed_file(path) if path else None
    with Session(engine) as session:
        summary = seed_demo_data(session, data)
    print(f"Created {summary['organizations']} organizations, {summary['users']} users, "
          f"{summary['projects']} projects; skipped {summary['skipped']} existing rows")


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--file', type=pathlib.Path, help='JSON seed file (defaults to the built-in demo set)')
    args = parser.parse_args()
    main(path=args.file)
