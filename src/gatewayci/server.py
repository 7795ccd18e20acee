# server.py
from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from . import config
from .events import Event
from .groups import GroupFailure
from .pipeline import InvalidPayloadError, events
from .registry import JOBS, UnknownJobError
from .runner import CIError, DockerRunner, JobFailure, JobRunner

app = FastAPI(title="gatewayci event intake")

# -------------------- Schemas --------------------

class EventResponse(BaseModel):
    status: str  # ok|ignored
    results: dict[str, str]

class JobsResponse(BaseModel):
    jobs: list[str]

# -------------------- Dependencies --------------------

def get_runner() -> JobRunner:
    return DockerRunner(config.SOURCE_DIR)

def _failed(results: dict[str, str], error: str) -> HTTPException:
    detail: dict[str, Any] = {"status": "failed", "error": error, "results": results}
    return HTTPException(status_code=500, detail=detail)

# -------------------- Endpoints --------------------

@app.post("/events", response_model=EventResponse)
def handle_event(event: Event, runner: JobRunner = Depends(get_runner)):
    # Plain def: FastAPI runs it in a worker thread, jobs block until done.
    if events.handler_for(event.source, event.type) is None:
        return EventResponse(status="ignored", results={})

    try:
        results = events.dispatch(event, runner)
    except UnknownJobError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidPayloadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GroupFailure as e:
        raise _failed(e.results, str(e))
    except JobFailure as e:
        raise _failed({e.job: "failed"}, str(e))
    except CIError as e:
        raise _failed({}, str(e))

    return EventResponse(status="ok", results=results)

@app.get("/jobs", response_model=JobsResponse)
def list_jobs():
    return JobsResponse(jobs=list(JOBS))
