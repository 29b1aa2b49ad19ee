from typing import Any

from fastapi import APIRouter, Depends

from tempmail.core.security import api_key_auth
from tempmail.db.session import get_db
from tempmail.local.ingest import ingest_eml_files

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.post("/local")
def run_local_ingest_job(
    payload: dict | None = None, db=Depends(get_db)
) -> dict[str, Any]:
    """Ingest local .eml files from a directory (defaults to `sample/`).

    Body example:
      { "directory": "sample", "pattern": "*.eml", "to": "inbox@temp.example.com" }
    """
    params = payload or {}
    directory = params.get("directory", "sample")
    pattern = params.get("pattern", "*.eml")
    result = ingest_eml_files(db, directory=directory, pattern=pattern, envelope_to=params.get("to"))
    return {"status": "completed", **result}
