from typing import Any

from fastapi import APIRouter, Depends

from tempmail.core.security import api_key_auth
from tempmail.workers.jobs import reparse_message_job
from tempmail.workers.queue import get_queue

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.post("/message/{message_id}")
def reprocess_message(message_id: int) -> dict[str, Any]:
    """Enqueue a body reparse for a given message id and return job id."""
    q = get_queue("default")
    job = q.enqueue(reparse_message_job, message_id)
    return {"status": "accepted", "job_id": job.get_id(), "message_id": message_id}
