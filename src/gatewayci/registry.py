# registry.py
# All jobs by name. When a check_run:rerequested event wants a single job
# re-run, this is where that job is found.
from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Dict, Mapping

from . import jobs
from .events import Event
from .model import Job

JobFactory = Callable[[Event], Job]


class UnknownJobError(LookupError):
    """Raised when a re-run names a job the registry does not know."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No job found with name: {self.name}"


_jobs: Dict[str, JobFactory] = {
    jobs.TEST_UNIT: jobs.unit_test_job,
    jobs.LINT: jobs.lint_job,
    jobs.LINT_CHART: jobs.lint_chart_job,
    jobs.BUILD_RECEIVER: jobs.build_receiver_job,
    jobs.PUSH_RECEIVER: jobs.push_receiver_job,
    jobs.BUILD_MONITOR: jobs.build_monitor_job,
    jobs.PUSH_MONITOR: jobs.push_monitor_job,
    jobs.PUBLISH_CHART: jobs.publish_chart_job,
}

JOBS: Mapping[str, JobFactory] = MappingProxyType(_jobs)


def lookup(name: str) -> JobFactory:
    """Exact-match lookup, no fallback."""
    try:
        return JOBS[name]
    except KeyError:
        raise UnknownJobError(name) from None


def job_names() -> list[str]:
    return list(JOBS)
