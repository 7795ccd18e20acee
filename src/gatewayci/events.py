# events.py
from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .ui.console import get_console

if TYPE_CHECKING:
    from .runner import JobRunner


GITHUB_SOURCE = "brigade.sh/github"


class InvalidEventError(ValueError):
    """Raised when an event document cannot be parsed."""
    pass


# -------------------- Schemas --------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class GitConfig(_Frozen):
    clone_url: Optional[str] = Field(default=None, alias="cloneURL")
    commit: Optional[str] = None
    ref: Optional[str] = None


class Worker(_Frozen):
    git: Optional[GitConfig] = None


class Project(_Frozen):
    id: Optional[str] = None
    secrets: Dict[str, str] = Field(default_factory=dict)


class Event(_Frozen):
    """
    One inbound event, as delivered to a worker by the event platform.

    `payload` is kept as the raw string the platform sent; handlers that
    need structure (check_run:rerequested) parse it themselves.
    """
    source: str
    type: str
    id: Optional[str] = None
    project: Project = Field(default_factory=Project)
    worker: Worker = Field(default_factory=Worker)
    payload: str = ""

    @property
    def git_ref(self) -> Optional[str]:
        if self.worker.git is None:
            return None
        return self.worker.git.ref

    @property
    def secrets(self) -> Dict[str, str]:
        return self.project.secrets


def parse_event(data: dict) -> Event:
    try:
        return Event.model_validate(data)
    except ValidationError as e:
        raise InvalidEventError(f"Invalid event document: {e}") from e


def load_event(path: str | Path) -> Event:
    """
    Load a worker event document from a JSON file.

    Raises:
      FileNotFoundError: the file does not exist
      InvalidEventError: the file is not a valid event document
    """
    event_path = Path(path).expanduser()
    if not event_path.exists():
        raise FileNotFoundError(f"Event file not found: {event_path}")

    try:
        data = json.loads(event_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidEventError(f"Event file {event_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidEventError(f"Event file {event_path} must contain a JSON object")

    return parse_event(data)


# -------------------- Dispatch --------------------

Handler = Callable[[Event, "JobRunner"], Dict[str, str]]


class EventDispatcher:
    """Binds handlers to (source, type) pairs and routes events to them."""

    def __init__(self) -> None:
        self._handlers: Dict[Tuple[str, str], Handler] = {}

    def on(self, source: str, event_type: str) -> Callable[[Handler], Handler]:
        """
        Decorator registering a handler. Stack it to bind one handler to
        several event types.
        """
        def register(handler: Handler) -> Handler:
            key = (source, event_type)
            if key in self._handlers:
                raise ValueError(f"Handler already registered for {source} {event_type}")
            self._handlers[key] = handler
            return handler

        return register

    def handler_for(self, source: str, event_type: str) -> Optional[Handler]:
        return self._handlers.get((source, event_type))

    def bindings(self) -> list[Tuple[str, str]]:
        return sorted(self._handlers)

    def dispatch(self, event: Event, runner: "JobRunner") -> Dict[str, str]:
        """
        Run the handler bound to the event. Events nobody handles are a
        no-op. Handler errors propagate to the caller.
        """
        console = get_console()
        handler = self.handler_for(event.source, event.type)
        if handler is None:
            console.print_info(f"No handler for {event.source} {event.type}; nothing to do.")
            return {}

        console.print_event_received(event.source, event.type, event.git_ref)
        return handler(event, runner)
