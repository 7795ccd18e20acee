# runner.py
from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol

from .model import Job
from .ui.console import get_console


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class CIError(Exception):
    """
    Structured CI error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    job: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.job:
            lines.append(f"job={self.job}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class JobFailure(Exception):
    job: str
    image: str
    exit_code: int
    output: str = ""

    def __str__(self) -> str:
        return f"[{self.job}] failed in {self.image} (exit={self.exit_code})"


TOOL_HINTS = {
    "docker": "Install Docker and ensure the daemon is running.",
}


# ----------------------------------------------------------------------
# Runners
# ----------------------------------------------------------------------

class JobRunner(Protocol):
    """Executes one job. Returns "ok" or raises JobFailure."""

    def run(self, job: Job) -> str:
        ...


def _check_docker_available(job: Job) -> None:
    try:
        subprocess.run(
            ["docker", "--version"],
            capture_output=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        raise CIError(
            kind="docker_unavailable",
            job=job.name,
            message="Docker is not available",
            details={"hint": TOOL_HINTS["docker"]},
        )


class DockerRunner:
    """
    Runs jobs locally with `docker run`, mounting source_dir at the job's
    source mount path.
    """

    def __init__(self, source_dir: str | Path = "."):
        self.source_dir = Path(source_dir).resolve()

    def command_for(self, job: Job) -> List[str]:
        container = job.primary_container
        cmd = ["docker", "run", "--rm"]

        if container.source_mount_path:
            cmd.extend(["-v", f"{self.source_dir}:{container.source_mount_path}"])
        if container.working_directory:
            cmd.extend(["-w", container.working_directory])

        # Values come from the client's environment so secrets stay off the command line
        for key in sorted(container.environment):
            cmd.extend(["-e", key])

        cmd.append(container.image)
        cmd.extend(container.command)
        cmd.extend(container.arguments)
        return cmd

    def run(self, job: Job) -> str:
        console = get_console()
        _check_docker_available(job)

        env = os.environ.copy()
        env.update(job.env)

        console.print_job_start(job.name, job.image)
        proc = subprocess.run(
            self.command_for(job),
            env=env,
            text=True,
            capture_output=True,
        )
        output = (proc.stdout or "") + (proc.stderr or "")
        console.print_job_output(job.name, output)

        if proc.returncode != 0:
            raise JobFailure(
                job=job.name,
                image=job.image,
                exit_code=proc.returncode,
                output=output[-4000:],
            )
        return "ok"
