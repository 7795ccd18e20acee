from __future__ import annotations

import json
import threading

import pytest

from gatewayci.events import GITHUB_SOURCE, parse_event
from gatewayci.runner import JobFailure
from gatewayci.ui.console import Console, set_console


class FakeRunner:
    """Records jobs instead of running containers. Jobs named in `fail` fail."""

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.jobs = {}
        self.log = []  # ("start" | "end", job name)
        self._lock = threading.Lock()

    @property
    def ran(self):
        return [name for kind, name in self.log if kind == "start"]

    def run(self, job):
        with self._lock:
            self.jobs[job.name] = job
            self.log.append(("start", job.name))
        if job.name in self.fail:
            raise JobFailure(job=job.name, image=job.image, exit_code=2, output="boom")
        with self._lock:
            self.log.append(("end", job.name))
        return "ok"


def event_doc(event_type, ref=None, secrets=None, job_name=None):
    payload = ""
    if job_name is not None:
        payload = json.dumps({"check_run": {"name": job_name}})
    return {
        "source": GITHUB_SOURCE,
        "type": event_type,
        "project": {"id": "slack-gateway", "secrets": secrets or {}},
        "worker": {"git": {"cloneURL": "https://github.com/example/slack-gateway.git", "ref": ref}},
        "payload": payload,
    }


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console())
    yield


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_event():
    def _make(event_type="check_suite:requested", ref=None, secrets=None, job_name=None):
        return parse_event(event_doc(event_type, ref=ref, secrets=secrets, job_name=job_name))
    return _make


@pytest.fixture
def make_doc():
    return event_doc


@pytest.fixture
def failing_runner():
    def _make(*names):
        return FakeRunner(fail=names)
    return _make
