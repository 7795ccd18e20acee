# groups.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Dict, List, Protocol, Union

from .model import Job
from .runner import JobRunner
from .ui.console import get_console


class Runnable(Protocol):
    def run(self, runner: JobRunner) -> Dict[str, str]:
        ...


class GroupFailure(Exception):
    """
    Raised when a member of a group fails. `results` holds the status of
    every job the group got to: ok or failed.
    """

    def __init__(self, failures: List[BaseException], results: Dict[str, str]):
        self.failures = failures
        self.results = results
        super().__init__(str(self))

    def __str__(self) -> str:
        failed = sorted(name for name, status in self.results.items() if status == "failed")
        return f"Group failed: {failed}"


def _job_names(member: Union[Job, "ConcurrentGroup", "SerialGroup"]) -> List[str]:
    if isinstance(member, Job):
        return [member.name]
    names: List[str] = []
    for m in member.members:
        names.extend(_job_names(m))
    return names


class ConcurrentGroup:
    """
    Runs all members at the same time. Complete when every member has
    finished; fails as a whole if any member fails.

    Every member starts immediately, so a failure never stops a sibling:
    the group waits for all of them and then reports the failure.
    """

    def __init__(self, *members: Runnable):
        self.members = list(members)

    def run(self, runner: JobRunner) -> Dict[str, str]:
        results: Dict[str, str] = {}
        failures: List[BaseException] = []
        if not self.members:
            return results

        with ThreadPoolExecutor(max_workers=len(self.members)) as pool:
            futures = {pool.submit(m.run, runner): m for m in self.members}
            wait(futures)

        for future, member in futures.items():
            exc = future.exception()
            if exc is None:
                results.update(future.result())
            elif isinstance(exc, GroupFailure):
                failures.extend(exc.failures)
                results.update(exc.results)
            else:
                failures.append(exc)
                for name in _job_names(member):
                    results[name] = "failed"

        if failures:
            raise GroupFailure(failures, results)
        return results


class SerialGroup:
    """
    Runs members one after another. A member is only started once every
    member before it has succeeded.
    """

    def __init__(self, *members: Runnable):
        self.members = list(members)

    def run(self, runner: JobRunner) -> Dict[str, str]:
        console = get_console()
        results: Dict[str, str] = {}
        for idx, member in enumerate(self.members):
            console.print_phase(idx + 1, _job_names(member))
            try:
                results.update(member.run(runner))
            except GroupFailure as e:
                results.update(e.results)
                raise GroupFailure(e.failures, results) from e
            except Exception as e:
                for name in _job_names(member):
                    results[name] = "failed"
                raise GroupFailure([e], results) from e
        return results
