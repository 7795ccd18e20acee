# cli.py
from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import click

from gatewayci import config
from gatewayci.events import GITHUB_SOURCE, Event, InvalidEventError, load_event, parse_event
from gatewayci.git_facts.git import current_ref, head_sha, remote_url
from gatewayci.groups import GroupFailure
from gatewayci.pipeline import InvalidPayloadError, events
from gatewayci.registry import JOBS, UnknownJobError
from gatewayci.runner import CIError, DockerRunner, JobFailure
from gatewayci.ui.console import Console, get_console, set_console


def _parse_secrets(pairs: tuple[str, ...]) -> dict[str, str]:
    secrets: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--secret")
        secrets[key] = value
    return secrets


def _dispatch(event: Event, source_dir: str) -> None:
    """Dispatch an event with a local docker runner and report the outcome."""
    console = get_console()
    runner = DockerRunner(source_dir)

    try:
        results = events.dispatch(event, runner)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except UnknownJobError as e:
        console.print_error(
            "Unknown job",
            str(e),
            details=["Known jobs:", *(f"  {name}" for name in JOBS)],
        )
        sys.exit(1)
    except InvalidPayloadError as e:
        console.print_error("Invalid check_run payload", str(e))
        sys.exit(1)
    except GroupFailure as e:
        for failure in e.failures:
            console.print_exception(failure)
        console.print_results(e.results)
        sys.exit(1)
    except JobFailure as e:
        console.print_exception(e)
        console.print_results({e.job: "failed"})
        sys.exit(1)
    except CIError as e:
        console.print_error(
            "CI environment error",
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()],
        )
        sys.exit(1)

    console.print_results(results)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """gatewayci: CI/CD pipeline for the slack gateway."""
    set_console(Console(debug=debug))
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--event",
    "event_path",
    default=None,
    help="Event document path (defaults to $GATEWAYCI_EVENT_FILE or /var/event/event.json)",
)
@click.option("--source-dir", default=None, help="Source directory mounted into job containers")
def process(event_path, source_dir):
    """Handle one event delivered by the event platform."""
    console = get_console()
    path = Path(event_path or config.EVENT_FILE)

    try:
        event = load_event(path)
    except FileNotFoundError as e:
        console.print_error(
            "Event file not found",
            str(e),
            suggestion="Point at an event document:\n  gatewayci process --event event.json",
        )
        sys.exit(1)
    except InvalidEventError as e:
        console.print_error("Invalid event", str(e))
        sys.exit(1)

    _dispatch(event, source_dir or config.SOURCE_DIR)


@cli.command()
@click.argument("event_type")
@click.option("--ref", default=None, help="Git ref (defaults to the current branch)")
@click.option("--job", "job_name", default=None, help="Job to re-run (check_run:rerequested)")
@click.option("--secret", "secrets", multiple=True, help="Project secret as KEY=VALUE (repeatable)")
@click.option("--source-dir", default=None, help="Source directory mounted into job containers")
def trigger(event_type, ref, job_name, secrets, source_dir):
    """Run the pipeline locally for a synthetic GitHub event."""
    console = get_console()

    commit = None
    clone_url = None
    if not ref:
        try:
            ref = current_ref()
            console.print_debug(f"Using git ref: {ref}")
        except (subprocess.CalledProcessError, FileNotFoundError):
            console.print_error(
                "Could not determine git ref",
                "No --ref specified and the current branch could not be read.",
                suggestion="Please specify --ref explicitly:\n  gatewayci trigger push --ref refs/tags/v1.0.0",
            )
            sys.exit(1)
    try:
        commit = head_sha()
        clone_url = remote_url()
    except (subprocess.CalledProcessError, FileNotFoundError):
        console.print_debug("Not in a git checkout with an origin remote")

    payload = ""
    if job_name:
        payload = json.dumps({"check_run": {"name": job_name}})

    event = parse_event({
        "source": GITHUB_SOURCE,
        "type": event_type,
        "project": {"secrets": _parse_secrets(secrets)},
        "worker": {"git": {"cloneURL": clone_url, "commit": commit, "ref": ref}},
        "payload": payload,
    })
    _dispatch(event, source_dir or config.SOURCE_DIR)


@cli.command(name="jobs")
def list_jobs():
    """List jobs that can be re-run by name."""
    console = get_console()
    for name in JOBS:
        console.print_info(name)


if __name__ == "__main__":
    cli()
