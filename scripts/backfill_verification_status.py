from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from jobboard.config import build_sqlalchemy_db_url, settings  # noqa: E402
from jobboard.data.options import NOT_VERIFIED  # noqa: E402
from jobboard.database import Base, SessionLocal, engine, mask_db_url  # noqa: E402
import jobboard.models  # noqa: F401,E402  # ensure all models are registered
from jobboard.models.job import Job  # noqa: E402
from jobboard.services.job_service import backfill_verification_status  # noqa: E402


def _ensure_tables() -> None:
    db_url = build_sqlalchemy_db_url(settings)
    if db_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Set verificationStatus to 'not verified' on jobs created before the "
            "verification workflow existed. Same as POST /admin/maintenance/verification-status."
        )
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report how many jobs would be updated",
    )
    args = parser.parse_args(argv)

    _ensure_tables()
    print(f"database: {mask_db_url(build_sqlalchemy_db_url(settings))}")

    with SessionLocal() as db:
        if args.dry_run:
            pending = (
                db.query(Job)
                .filter((Job.verification_status.is_(None)) | (Job.verification_status == ""))
                .count()
            )
            print(f"{pending} jobs would be set to '{NOT_VERIFIED}'")
            return 0
        updated = backfill_verification_status(db)

    print(f"updated {updated} jobs to '{NOT_VERIFIED}'")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
