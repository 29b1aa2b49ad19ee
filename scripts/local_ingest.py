"""Run local .eml ingestion from a directory (default: sample/).

Usage:
  python scripts/local_ingest.py [directory] [pattern] [envelope_to]

Examples:
  python scripts/local_ingest.py
  python scripts/local_ingest.py sample "*.eml" inbox@temp.example.com
"""

from __future__ import annotations

import sys
from typing import Optional

from tempmail.core.config import get_settings
from tempmail.core.logging import configure_logging
from tempmail.db.session import SessionLocal, init_db
from tempmail.local.ingest import ingest_eml_files


def main(argv: Optional[list[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    directory = argv[0] if len(argv) >= 1 else "sample"
    pattern = argv[1] if len(argv) >= 2 else "*.eml"
    envelope_to = argv[2] if len(argv) >= 3 else None

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    if settings.AUTO_CREATE_SCHEMA:
        init_db()

    db = SessionLocal()
    try:
        result = ingest_eml_files(db, directory=directory, pattern=pattern, envelope_to=envelope_to)
        print({"directory": directory, "pattern": pattern, **result})
    finally:
        db.close()


if __name__ == "__main__":
    main()
