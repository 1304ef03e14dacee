#!/usr/bin/env python3
"""
Candidate Seed Script

Creates candidate rows for local development, so that resume intake and
the search summary endpoint have something to work against. Candidate
CRUD otherwise belongs to the wider recruiting system.

This script can:
1. Insert a built-in set of sample candidates
2. Insert candidates from a JSON file (list of objects with candidate columns)
3. Print a session token for calling /api/search/summary

Usage:
    # Seed sample candidates
    python scripts/seed_candidates.py --seed

    # Import from a JSON file
    python scripts/seed_candidates.py --json-file path/to/candidates.json

    # Print a bearer token
    python scripts/seed_candidates.py --token
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hirewise.auth import create_session_token
from hirewise.config import get_settings
from hirewise.database import Database
from hirewise.models import CANDIDATE_WRITABLE_FIELDS
from hirewise.stores import CandidateStore

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

settings = get_settings()


SEED_CANDIDATES = [
    {
        "id": "c1",
        "name": "Priya Sharma",
        "current_role": "React Developer",
        "current_company": "Pixel Labs",
        "location": "Mumbai",
        "total_experience": "6 years",
        "technical_skills": ["React", "TypeScript", "Redux", "Node.js"],
    },
    {
        "id": "c2",
        "name": "Ravi Kumar",
        "current_role": "Fleet Manager",
        "current_company": "SwiftMove Logistics",
        "location": "Hyderabad",
        "total_experience": "8 years",
        "technical_skills": ["GPS tracking", "Route planning", "Driver management", "SAP"],
    },
    {
        "id": "c3",
        "name": "Anita Desai",
        "current_role": "Warehouse Executive",
        "current_company": "Northline Retail",
        "location": "Ludhiana, Punjab",
        "total_experience": "3 years",
        "technical_skills": ["Inventory management", "FIFO", "Excel"],
    },
]


async def import_candidates(store: CandidateStore, candidates: List[dict]) -> int:
    count = 0
    for data in candidates:
        candidate_id = data.get("id")
        if candidate_id and await store.get_candidate(candidate_id):
            logger.info(f"  Skipping existing candidate {candidate_id}")
            continue

        unknown = set(data) - CANDIDATE_WRITABLE_FIELDS - {"id"}
        if unknown:
            logger.warning(f"  Ignoring unknown fields for {candidate_id}: {', '.join(sorted(unknown))}")
        fields = {k: v for k, v in data.items() if k not in unknown}

        candidate = await store.add_candidate(**fields)
        logger.info(f"  Added {candidate.id}: {candidate.name or 'unnamed'} ({candidate.location or 'no location'})")
        count += 1
    return count


async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed candidate rows")
    parser.add_argument("--json-file", type=Path, help="Path to a JSON list of candidates")
    parser.add_argument("--seed", action="store_true", help="Insert sample candidates")
    parser.add_argument("--token", action="store_true", help="Print a session token")

    args = parser.parse_args()

    if args.token:
        print(create_session_token(settings.secret_key))
        return

    database = Database(settings.database_url)
    await database.init_db()
    store = CandidateStore(database)

    try:
        if args.json_file:
            logger.info(f"Importing from JSON: {args.json_file}")
            candidates = json.loads(args.json_file.read_text())
            count = await import_candidates(store, candidates)
            logger.info(f"Imported {count} candidates")

        else:
            logger.info("Importing sample candidates...")
            count = await import_candidates(store, SEED_CANDIDATES)
            logger.info(f"Imported {count} sample candidates")

    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
