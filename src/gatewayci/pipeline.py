# pipeline.py
# Which jobs run for which GitHub events.
from __future__ import annotations

import json
from typing import Dict

from . import config
from .events import GITHUB_SOURCE, Event, EventDispatcher
from .groups import ConcurrentGroup, SerialGroup
from .jobs import (
    RELEASE_TAG_REGEX,
    build_monitor_job,
    build_receiver_job,
    lint_chart_job,
    lint_job,
    publish_chart_job,
    push_monitor_job,
    push_receiver_job,
    release_version,
    unit_test_job,
)
from .registry import lookup
from .runner import JobRunner
from .ui.console import get_console

events = EventDispatcher()


class InvalidPayloadError(ValueError):
    """Raised when a check_run payload does not name a job."""
    pass


@events.on(GITHUB_SOURCE, "check_suite:requested")
@events.on(GITHUB_SOURCE, "check_suite:rerequested")
def run_suite(event: Event, runner: JobRunner) -> Dict[str, str]:
    """
    Run the whole suite WITHOUT publishing anything. If everything passes
    and the ref is the main branch, publish "edge" images.
    """
    phases = [
        ConcurrentGroup(  # basic tests
            unit_test_job(event),
            lint_job(event),
            lint_chart_job(event),
        ),
        ConcurrentGroup(  # build everything
            build_receiver_job(event),
            build_monitor_job(event),
        ),
    ]
    if event.git_ref == config.MAIN_BRANCH:
        get_console().print_info("Edge images will be published after a green build")
        phases.append(ConcurrentGroup(  # push "edge" images
            push_receiver_job(event),
            push_monitor_job(event),
        ))
    return SerialGroup(*phases).run(runner)


def requested_job_name(event: Event) -> str:
    try:
        payload = json.loads(event.payload)
        name = payload["check_run"]["name"]
    except (ValueError, TypeError, KeyError) as e:
        raise InvalidPayloadError(
            f"check_run payload does not name a job: {event.payload!r}"
        ) from e
    if not isinstance(name, str):
        raise InvalidPayloadError(f"check_run name must be a string, got {name!r}")
    return name


@events.on(GITHUB_SOURCE, "check_run:rerequested")
def rerun_job(event: Event, runner: JobRunner) -> Dict[str, str]:
    """
    Re-run a single job by name. Jobs from later phases are re-run as-is;
    their prerequisites are not re-checked.
    """
    factory = lookup(requested_job_name(event))
    return factory(event).run(runner)


@events.on(GITHUB_SOURCE, "push")
def release(event: Event, runner: JobRunner) -> Dict[str, str]:
    """
    Pushes to branches already trigger check suites. Only tags that look
    like a semantic version mean a formal release.
    """
    ref = event.git_ref
    if release_version(ref) is None:
        get_console().print_info(
            f"Ref {ref} does not match release tag regex ({RELEASE_TAG_REGEX.pattern}); not releasing."
        )
        return {}

    # The chart references the images, so it is only published after every
    # image push has succeeded.
    return SerialGroup(
        ConcurrentGroup(
            push_receiver_job(event),
            push_monitor_job(event),
        ),
        publish_chart_job(event),
    ).run(runner)
