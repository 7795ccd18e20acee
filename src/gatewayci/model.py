# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from .runner import JobRunner


@dataclass
class Container:
    """The container a job runs in."""
    image: str
    command: List[str] = field(default_factory=list)
    arguments: List[str] = field(default_factory=list)
    environment: Dict[str, str] = field(default_factory=dict)
    working_directory: Optional[str] = None
    source_mount_path: Optional[str] = None


@dataclass
class Job:
    """
    A named unit of work bound to a single primary container.

    Jobs are built fresh for every event and are never persisted.
    """
    name: str
    primary_container: Container

    @property
    def image(self) -> str:
        return self.primary_container.image

    @property
    def env(self) -> Dict[str, str]:
        return self.primary_container.environment

    def run(self, runner: "JobRunner") -> Dict[str, str]:
        """Hand this job to a runner. Raises JobFailure if it fails."""
        return {self.name: runner.run(self)}
