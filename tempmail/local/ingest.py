"""Ingest local .eml files through the inbound mail handler.

This complements the routing hook by allowing local development/testing with
sample emails stored on disk.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy.orm import Session

from tempmail.mail.addresses import InvalidAddressError
from tempmail.mail.inbound import MessageTooLargeError, decode_raw_bytes, store_inbound_message

logger = logging.getLogger(__name__)


def ingest_eml_files(
    db: Session,
    *,
    directory: str = "sample",
    pattern: str = "*.eml",
    envelope_to: str | None = None,
) -> dict[str, int]:
    """Store every file matching ``pattern`` under ``directory``.

    Returns counts: {"messages": X, "skipped": Y}
    """
    dir_path = Path(directory)
    files = sorted(dir_path.glob(pattern))
    stored = 0
    skipped = 0

    for f in files:
        try:
            raw = f.read_bytes()
        except OSError as exc:
            logger.warning("cannot read %s: %s", f, exc)
            skipped += 1
            continue

        try:
            store_inbound_message(db, decode_raw_bytes(raw), envelope_to=envelope_to)
        except (InvalidAddressError, MessageTooLargeError) as exc:
            db.rollback()
            logger.warning("skipping %s: %s", f.name, exc)
            skipped += 1
            continue

        stored += 1

    return {"messages": stored, "skipped": skipped}
