import pytest

from gatewayci.groups import GroupFailure
from gatewayci.pipeline import InvalidPayloadError, events, release, requested_job_name, rerun_job, run_suite
from gatewayci.registry import UnknownJobError
from gatewayci.runner import JobFailure

BASIC = {"test-unit", "lint", "lint-chart"}
BUILD = {"build-receiver", "build-monitor"}
PUSH = {"push-receiver", "push-monitor"}


def _index(runner, kind, name):
    return runner.log.index((kind, name))


# -------------------- check suites --------------------

@pytest.mark.parametrize("event_type", ["check_suite:requested", "check_suite:rerequested"])
def test_check_suite_events_run_the_suite(make_event, runner, event_type):
    results = events.dispatch(make_event(event_type, ref="develop"), runner)
    assert set(results) == BASIC | BUILD
    assert set(results.values()) == {"ok"}


def test_suite_on_main_pushes_edge_images(make_event, runner):
    results = run_suite(make_event(ref="main"), runner)

    assert set(runner.ran) == BASIC | BUILD | PUSH
    assert all(results[name] == "ok" for name in PUSH)
    last_build_end = max(_index(runner, "end", name) for name in BUILD)
    first_push_start = min(_index(runner, "start", name) for name in PUSH)
    assert last_build_end < first_push_start


@pytest.mark.parametrize("ref", ["develop", "refs/heads/main", "main2", None])
def test_suite_elsewhere_does_not_push(make_event, runner, ref):
    run_suite(make_event(ref=ref), runner)
    assert set(runner.ran) == BASIC | BUILD


def test_suite_builds_only_after_basic_tests(make_event, runner):
    run_suite(make_event(ref="develop"), runner)
    last_basic_end = max(_index(runner, "end", name) for name in BASIC)
    first_build_start = min(_index(runner, "start", name) for name in BUILD)
    assert last_basic_end < first_build_start


@pytest.mark.parametrize("failing", sorted(BASIC))
def test_basic_test_failure_skips_builds(make_event, failing_runner, failing):
    runner = failing_runner(failing)
    with pytest.raises(GroupFailure) as exc_info:
        run_suite(make_event(ref="main"), runner)

    assert not BUILD & set(runner.ran)
    assert not PUSH & set(runner.ran)
    assert exc_info.value.results[failing] == "failed"


def test_build_failure_skips_edge_push(make_event, failing_runner):
    runner = failing_runner("build-monitor")
    with pytest.raises(GroupFailure):
        run_suite(make_event(ref="main"), runner)

    assert not PUSH & set(runner.ran)


def test_edge_push_failure_keeps_earlier_results(make_event, failing_runner):
    runner = failing_runner("push-monitor")
    with pytest.raises(GroupFailure) as exc_info:
        run_suite(make_event(ref="main"), runner)

    results = exc_info.value.results
    assert results["push-monitor"] == "failed"
    assert results["push-receiver"] == "ok"
    assert all(results[name] == "ok" for name in BASIC | BUILD)
    assert len(results) == 7


def test_suite_jobs_carry_the_event(make_event, runner):
    run_suite(make_event(ref="main", secrets={"dockerhubOrg": "acme"}), runner)
    assert runner.jobs["push-receiver"].env["DOCKER_ORG"] == "acme"
    assert runner.jobs["lint"].env["SKIP_DOCKER"] == "true"


# -------------------- single job re-run --------------------

def test_rerun_runs_exactly_the_named_job(make_event, runner):
    results = events.dispatch(make_event("check_run:rerequested", ref="main", job_name="lint"), runner)
    assert runner.ran == ["lint"]
    assert results == {"lint": "ok"}


def test_rerun_does_not_enforce_prerequisites(make_event, runner):
    rerun_job(make_event("check_run:rerequested", ref="main", job_name="push-receiver"), runner)
    assert runner.ran == ["push-receiver"]


def test_rerun_unknown_job(make_event, runner):
    with pytest.raises(UnknownJobError, match="No job found with name: nonexistent-job"):
        events.dispatch(make_event("check_run:rerequested", job_name="nonexistent-job"), runner)
    assert runner.ran == []


def test_rerun_failure_propagates(make_event, failing_runner):
    runner = failing_runner("lint")
    with pytest.raises(JobFailure):
        rerun_job(make_event("check_run:rerequested", job_name="lint"), runner)


@pytest.mark.parametrize(
    "payload",
    ["", "not json", "[]", '{"check_run": {}}', '{"check_suite": {"name": "lint"}}', '{"check_run": {"name": 3}}'],
)
def test_rerun_invalid_payload(make_event, payload):
    event = make_event("check_run:rerequested").model_copy(update={"payload": payload})
    with pytest.raises(InvalidPayloadError):
        requested_job_name(event)


# -------------------- release --------------------

def test_release_pushes_images_then_publishes_chart(make_event, runner):
    results = events.dispatch(make_event("push", ref="refs/tags/v2.0.0"), runner)

    assert set(results) == PUSH | {"publish-chart"}
    chart_start = _index(runner, "start", "publish-chart")
    for name in PUSH:
        assert _index(runner, "end", name) < chart_start
    assert runner.jobs["publish-chart"].env["VERSION"] == "v2.0.0"
    assert runner.jobs["push-monitor"].env["VERSION"] == "v2.0.0"


@pytest.mark.parametrize("failing", sorted(PUSH))
def test_release_image_push_failure_blocks_chart(make_event, failing_runner, failing):
    runner = failing_runner(failing)
    with pytest.raises(GroupFailure):
        release(make_event("push", ref="refs/tags/v2.0.0"), runner)

    assert "publish-chart" not in runner.ran


@pytest.mark.parametrize("ref", ["refs/heads/main", "refs/tags/release", "refs/tags/v2.0.0\n", None])
def test_push_without_release_tag_is_a_no_op(make_event, runner, capsys, ref):
    assert release(make_event("push", ref=ref), runner) == {}
    assert runner.ran == []
    out = capsys.readouterr().out
    assert f"Ref {ref} does not match release tag regex" in out
    assert "not releasing" in out


def test_pipeline_bindings():
    assert events.bindings() == [
        ("brigade.sh/github", "check_run:rerequested"),
        ("brigade.sh/github", "check_suite:requested"),
        ("brigade.sh/github", "check_suite:rerequested"),
        ("brigade.sh/github", "push"),
    ]
