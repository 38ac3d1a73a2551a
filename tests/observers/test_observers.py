import json
import logging

from hoist.logging.log import init_logging
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import (
    ProvisionSummary,
    StageFailed,
    StageStarted,
    StageSucceeded,
    StateChanged,
    new_ctx,
)
from hoist.observers.jsonfile import JsonFileObserver
from hoist.observers.logger import LoggerObserver


class Capture:
    def __init__(self): self.events = []
    def notify(self, event): self.events.append(event)


class Broken:
    def notify(self, event): raise RuntimeError("nope")


def test_failing_observer_does_not_stop_others():
    cap = Capture()
    bus = EventBus([Broken(), cap])
    bus.emit(StageStarted(stage="Setting up Docker", commands=4, **new_ctx(env="default", context="10.0.0.5")))
    assert len(cap.events) == 1


def test_new_ctx_reuses_run_id():
    ctx = new_ctx(env="default", context="10.0.0.5", run_id="abc")
    assert ctx["run_id"] == "abc"
    assert ctx["ts"].endswith("Z")


def test_jsonfile_observer_appends_lines(tmp_path):
    path = tmp_path / "logs" / "run.jsonl"
    bus = EventBus([JsonFileObserver(path)])
    ctx = new_ctx(env="default", context="10.0.0.5")
    bus.emit(StageStarted(stage="Setting up VPS", commands=8, **ctx))
    bus.emit(StageSucceeded(stage="Setting up VPS", message="ok", duration_ms=12, **ctx))

    lines = [json.loads(l) for l in path.read_text().splitlines()]
    assert [l["type"] for l in lines] == ["StageStarted", "StageSucceeded"]
    assert lines[0]["context"] == "10.0.0.5"


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _logger(name):
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.handlers = [handler]
    return logger, handler


def test_logger_observer_writes_milestones_at_info():
    logger, handler = _logger("hoist.test.milestones")
    bus = EventBus([LoggerObserver(logger)])
    ctx = new_ctx(env="default", context="10.0.0.5")
    bus.emit(StateChanged(state="BaseConfigured", previous="OperationalAuthenticated", **ctx))
    bus.emit(StageFailed(stage="Setting up Docker", message="Docker failed", index=2, error="exit 100", **ctx))
    bus.emit(ProvisionSummary(status="FAILED", failed_at="RuntimeConfigured", error="StageFailure", **ctx))

    lines = [r.getMessage() for r in handler.records]
    assert all(r.levelno == logging.INFO for r in handler.records)
    assert lines[0] == "[10.0.0.5] OperationalAuthenticated -> BaseConfigured"
    assert lines[1] == "[10.0.0.5] Setting up Docker FAILED at command #2: exit 100"
    assert "FAILED at RuntimeConfigured" in lines[2]


def test_logger_observer_keeps_chatter_at_debug():
    logger, handler = _logger("hoist.test.chatter")
    ctx = new_ctx(env="default", context="10.0.0.5")
    LoggerObserver(logger).notify(StageStarted(stage="Setting up VPS", commands=8, **ctx))
    (record,) = handler.records
    assert record.levelno == logging.DEBUG
    assert record.getMessage() == "StageStarted stage='Setting up VPS' commands=8"


def test_init_logging_stamps_run_id_and_keeps_console_quiet(tmp_path):
    logger, run_id, log_path = init_logging(base_dir=tmp_path, name="hoist-test")
    try:
        console = next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))
        assert console.level == logging.WARNING
        logger.debug("exec: %s", "uptime")
        for h in logger.handlers:
            h.flush()
        text = log_path.read_text()
        assert log_path.parent == tmp_path
        assert f"hoist run {run_id} started" in text
        assert f"| {run_id[:8]} | exec: uptime" in text
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
