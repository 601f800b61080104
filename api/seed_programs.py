"""
Seed the programs table.

Programs are not created through the API; run this once per environment:

    python seed_programs.py                 # built-in program list
    python seed_programs.py programs.json   # list of {"name", "type", "semesters", "specializations"}

Programs that already exist (same name and type) are skipped, so the script
can be re-run safely.
"""

import sys
import json
import logging
from pathlib import Path

# Add the parent directory to the path so we can import catalog modules
sys.path.insert(0, str(Path(__file__).parent))

from catalog.config.database import SessionLocal, init_db
from catalog.core.exceptions import CatalogError
from catalog.models.program import Program
from catalog.utils.db_utils import create_program

logger = logging.getLogger("seed_programs")

DEFAULT_PROGRAMS = [
    {"name": "B.Tech", "type": "undergraduate", "semesters": 8,
     "specializations": ["Computer Science", "Electronics", "Mechanical", "Civil"]},
    {"name": "BCA", "type": "undergraduate", "semesters": 6, "specializations": []},
    {"name": "B.Sc", "type": "undergraduate", "semesters": 6,
     "specializations": ["Physics", "Chemistry", "Mathematics"]},
    {"name": "MBA", "type": "postgraduate", "semesters": 4,
     "specializations": ["Finance", "Marketing", "Human Resources"]},
    {"name": "MCA", "type": "postgraduate", "semesters": 4, "specializations": []},
    {"name": "M.Tech", "type": "postgraduate", "semesters": 4,
     "specializations": ["Computer Science", "VLSI"]},
]


def load_programs(path: str):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of programs")
    return data


def seed(programs) -> int:
    init_db()
    db = SessionLocal()
    created = 0
    try:
        for entry in programs:
            exists = db.query(Program).filter(
                Program.name == entry.get("name"),
                Program.type == entry.get("type")
            ).first()
            if exists:
                logger.info(f"Skipping existing program: {entry.get('name')} ({entry.get('type')})")
                continue
            try:
                program = create_program(
                    db,
                    name=entry.get("name"),
                    program_type=entry.get("type"),
                    semesters=entry.get("semesters"),
                    specializations=entry.get("specializations") or []
                )
            except CatalogError as e:
                logger.error(f"Invalid program entry {entry}: {e.message}")
                continue
            logger.info(f"Created program {program.id}: {program.name} ({program.semesters} semesters)")
            created += 1
    finally:
        db.close()
    return created


def main():
    programs = load_programs(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_PROGRAMS
    created = seed(programs)
    logger.info(f"Seeding complete: {created} program(s) created")


if __name__ == "__main__":
    main()
