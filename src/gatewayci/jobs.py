# jobs.py
# Job factories: every job in the pipeline is a `make <target>` run inside
# one of a handful of tool images.
from __future__ import annotations

import re
from typing import Dict, Optional

from . import config
from .events import Event
from .model import Container, Job

RELEASE_TAG_REGEX = re.compile(r"^refs/tags/(v[0-9]+(?:\.[0-9]+)*(?:-.+)?)$")

TEST_UNIT = "test-unit"
LINT = "lint"
LINT_CHART = "lint-chart"
BUILD_RECEIVER = "build-receiver"
PUSH_RECEIVER = "push-receiver"
BUILD_MONITOR = "build-monitor"
PUSH_MONITOR = "push-monitor"
PUBLISH_CHART = "publish-chart"


def release_version(ref: Optional[str]) -> Optional[str]:
    """
    Return the version string from a release tag ref, e.g.
    refs/tags/v1.2.3 -> v1.2.3. None when the ref is not a release tag.
    """
    if not ref:
        return None
    match = RELEASE_TAG_REGEX.fullmatch(ref)
    if match is None:
        return None
    return match.group(1)


def _secrets_env(event: Event, mapping: Dict[str, str]) -> Dict[str, str]:
    # env var -> secret name; secrets missing from the project are left out
    env: Dict[str, str] = {}
    for var, secret in mapping.items():
        value = event.secrets.get(secret)
        if value is not None:
            env[var] = value
    return env


def make_target_job(
    target: str,
    image: str,
    event: Event,
    env: Optional[Dict[str, str]] = None,
) -> Job:
    """Wrap a make target in a job. Nothing runs until the job is run."""
    environment = dict(env or {})
    environment["SKIP_DOCKER"] = "true"

    version = release_version(event.git_ref)
    if version:
        environment["VERSION"] = version

    return Job(
        name=target,
        primary_container=Container(
            image=image,
            command=["make"],
            arguments=[target],
            environment=environment,
            working_directory=config.LOCAL_PATH,
            source_mount_path=config.LOCAL_PATH,
        ),
    )


def push_image_job(target: str, event: Event) -> Job:
    """A make target job carrying image registry credentials."""
    env = {
        "DOCKER_REGISTRY": event.secrets.get("dockerhubRegistry") or config.DEFAULT_DOCKER_REGISTRY,
    }
    env.update(_secrets_env(event, {
        "DOCKER_ORG": "dockerhubOrg",
        "DOCKER_USERNAME": "dockerhubUsername",
        "DOCKER_PASSWORD": "dockerhubPassword",
    }))
    return make_target_job(target, config.KANIKO_IMAGE, event, env)


def publish_chart_job(event: Event) -> Job:
    env = {
        "HELM_REGISTRY": event.secrets.get("helmRegistry") or config.DEFAULT_HELM_REGISTRY,
    }
    env.update(_secrets_env(event, {
        "HELM_ORG": "helmOrg",
        "HELM_USERNAME": "helmUsername",
        "HELM_PASSWORD": "helmPassword",
    }))
    return make_target_job(PUBLISH_CHART, config.HELM_IMAGE, event, env)


# Basic tests

def unit_test_job(event: Event) -> Job:
    return make_target_job(TEST_UNIT, config.GO_IMAGE, event)


def lint_job(event: Event) -> Job:
    return make_target_job(LINT, config.GO_IMAGE, event)


def lint_chart_job(event: Event) -> Job:
    return make_target_job(LINT_CHART, config.HELM_IMAGE, event)


# Build / publish

def build_receiver_job(event: Event) -> Job:
    return make_target_job(BUILD_RECEIVER, config.KANIKO_IMAGE, event)


def push_receiver_job(event: Event) -> Job:
    return push_image_job(PUSH_RECEIVER, event)


def build_monitor_job(event: Event) -> Job:
    return make_target_job(BUILD_MONITOR, config.KANIKO_IMAGE, event)


def push_monitor_job(event: Event) -> Job:
    return push_image_job(PUSH_MONITOR, event)
