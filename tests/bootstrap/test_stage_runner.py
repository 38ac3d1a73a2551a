import pytest

from hoist.bootstrap.errors import SessionError, StageFailure
from hoist.bootstrap.stages.models import Stage
from hoist.bootstrap.stages.runner import run_stage
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import StageCommandCompleted, StageFailed, StageStarted, StageSucceeded
from hoist.utils.ssh_runner import CommandResult


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


class FakeRunner:
    """Records invocation order; exit codes are scripted per command."""
    def __init__(self, codes=None, raise_on=None):
        self.calls = []
        self.timeouts = []
        self._codes = codes or {}
        self._raise_on = raise_on
    def execute(self, command, *, capture=False, timeout=None):
        self.calls.append(command)
        self.timeouts.append(timeout)
        if command == self._raise_on:
            raise SessionError("connection reset")
        rc = self._codes.get(command, 0)
        return CommandResult(command=command, exit_code=rc, output="boom" if rc else "")


def _stage(n=4):
    return Stage(
        name="demo",
        commands=[f"step-{i}" for i in range(n)],
        success_message="demo done",
        failure_message="demo broke",
    )


def test_all_commands_run_in_order():
    runner = FakeRunner()
    cap = Capture()
    run_stage(_stage(), runner, bus=EventBus([cap]), timeout=30)
    assert runner.calls == ["step-0", "step-1", "step-2", "step-3"]
    assert runner.timeouts == [30, 30, 30, 30]
    kinds = [e.__class__.__name__ for e in cap.events]
    assert kinds[0] == "StageStarted"
    assert kinds[-1] == "StageSucceeded"
    assert kinds.count("StageCommandCompleted") == 4
    done = next(e for e in cap.events if isinstance(e, StageSucceeded))
    assert done.message == "demo done"


@pytest.mark.parametrize("failing", [0, 1, 3])
def test_nothing_runs_after_failing_command(failing):
    runner = FakeRunner(codes={f"step-{failing}": 2})
    cap = Capture()
    with pytest.raises(StageFailure) as exc:
        run_stage(_stage(), runner, bus=EventBus([cap]))

    assert runner.calls == [f"step-{i}" for i in range(failing + 1)]
    err = exc.value
    assert err.stage == "demo"
    assert err.index == failing
    assert err.command == f"step-{failing}"
    assert err.result.exit_code == 2
    assert err.result.output == "boom"

    failed = next(e for e in cap.events if isinstance(e, StageFailed))
    assert failed.index == failing
    assert failed.message == "demo broke"
    assert not any(isinstance(e, StageSucceeded) for e in cap.events)
    assert sum(isinstance(e, StageCommandCompleted) for e in cap.events) == failing


def test_runner_errors_propagate_unchanged():
    runner = FakeRunner(raise_on="step-1")
    cap = Capture()
    with pytest.raises(SessionError):
        run_stage(_stage(), runner, bus=EventBus([cap]))
    assert runner.calls == ["step-0", "step-1"]
    assert any(isinstance(e, StageFailed) for e in cap.events)


def test_works_without_bus():
    runner = FakeRunner()
    run_stage(_stage(2), runner)
    assert runner.calls == ["step-0", "step-1"]


def test_stage_is_immutable_and_non_empty():
    stage = _stage(2)
    assert stage.commands == ("step-0", "step-1")
    with pytest.raises(Exception):
        stage.name = "other"
    with pytest.raises(ValueError):
        Stage(name="empty", commands=[], success_message="", failure_message="")
