"""Seed officers from scripts/seed-officers.json into Postgres.

Registers each officer (by email; skips those already present) so every
review stage has at least one active officer in a dev database.

Usage:
    python -m scripts.seed_officers [path/to/seed-officers.json]

Default path: scripts/seed-officers.json (relative to project root).
Requires: DATABASE_URL (Postgres) and a migrated DB (alembic upgrade head).
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from permit_workflow.application.dtos.officer import OfficerCreate
from permit_workflow.application.use_cases.officers import OfficerAdministration
from permit_workflow.domain.enums import OfficerRole
from permit_workflow.domain.exceptions import ValidationException
from permit_workflow.infrastructure.persistence import database as db_mod
from permit_workflow.infrastructure.persistence.repositories import OfficerRepository


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_URL when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def run(path: Path) -> None:
    _load_env()
    if not path.exists():
        print(f"Seed file not found: {path}", file=sys.stderr)
        sys.exit(1)
    with path.open() as f:
        officers_data = json.load(f).get("officers", [])

    db_mod._ensure_engine()
    if db_mod.AsyncSessionLocal is None:
        print(
            "AsyncSessionLocal not configured. Set DATABASE_URL and run: alembic upgrade head",
            file=sys.stderr,
        )
        sys.exit(1)

    async with db_mod.AsyncSessionLocal() as session:
        async with session.begin():
            admin = OfficerAdministration(OfficerRepository(session))
            for o in officers_data:
                try:
                    officer = await admin.register_officer(
                        OfficerCreate(
                            name=o["name"],
                            email=o["email"],
                            role=OfficerRole(o["role"]),
                            is_active=o.get("is_active", True),
                        )
                    )
                    print(f"  Officer {officer.email} ({officer.role.value}) -> {officer.id}")
                except ValidationException as e:
                    print(f"  Skip officer {o['email']}: {e.message}")

    await db_mod.dispose_engine()
    print("Seed completed.")


def main() -> None:
    root = _project_root()
    path_arg = sys.argv[1] if len(sys.argv) > 1 else None
    path = Path(path_arg) if path_arg else root / "scripts" / "seed-officers.json"
    if not path.is_absolute():
        path = (root / path).resolve()
    asyncio.run(run(path))


if __name__ == "__main__":
    main()
