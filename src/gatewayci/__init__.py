from .events import Event, EventDispatcher, load_event
from .groups import ConcurrentGroup, SerialGroup
from .model import Container, Job
from .pipeline import events
from .registry import JOBS, lookup

__all__ = [
    "Event",
    "EventDispatcher",
    "load_event",
    "ConcurrentGroup",
    "SerialGroup",
    "Container",
    "Job",
    "events",
    "JOBS",
    "lookup",
]
