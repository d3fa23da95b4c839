"""Tests for the task graph executor (pure, no Pants engine)."""

from __future__ import annotations

import threading

import pytest

from pants_spigot import _task_graph
from pants_spigot._exceptions import TaskFailedError, TaskGraphError
from pants_spigot._task_graph import TaskGraph, TaskOutcome


class Recorder:
    """Collects start/finish events from task actions across threads."""

    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def action(self, name):
        def run():
            with self._lock:
                self.events.append(("start", name))
            with self._lock:
                self.events.append(("finish", name))

        return run

    def index(self, kind, name):
        return self.events.index((kind, name))

    def started(self):
        return [name for kind, name in self.events if kind == "start"]


def _graph(recorder, *names):
    graph = TaskGraph()
    for name in names:
        graph.register(name, recorder.action(name), description=f"{name} task")
    return graph


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    def test_duplicate_name(self):
        graph = TaskGraph()
        graph.register("a", lambda: None)
        with pytest.raises(TaskGraphError, match="already registered"):
            graph.register("a", lambda: None)

    def test_lookup(self):
        graph = TaskGraph()
        task = graph.register("a", lambda: None)
        assert graph["a"] is task
        assert "a" in graph
        assert "b" not in graph
        assert graph.names == ("a",)

    def test_unknown_lookup(self):
        with pytest.raises(TaskGraphError, match="Unknown task 'x'"):
            TaskGraph()["x"]

    def test_edges_deduplicated(self):
        graph = TaskGraph()
        task = graph.register("a", lambda: None)
        task.depends("b", "b").runs_after("c", "c")
        assert task.depends_on == ["b"]
        assert task.must_run_after == ["c"]


# =============================================================================
# Scheduling
# =============================================================================


class TestSchedule:
    def test_depends_on_pulls_in_dependencies(self):
        graph = _graph(Recorder(), "a", "b", "c")
        graph["c"].depends("b")
        graph["b"].depends("a")
        assert graph.schedule(["c"]) == ("a", "b", "c")

    def test_must_run_after_does_not_schedule(self):
        graph = _graph(Recorder(), "a", "b")
        graph["b"].runs_after("a")
        assert graph.schedule(["b"]) == ("b",)

    def test_must_run_after_orders_when_both_scheduled(self):
        graph = _graph(Recorder(), "late", "early")
        graph["late"].runs_after("early")
        assert graph.schedule(["late", "early"]) == ("early", "late")

    def test_registration_order_breaks_ties(self):
        graph = _graph(Recorder(), "x", "y", "z")
        assert graph.schedule(["z", "x", "y"]) == ("x", "y", "z")

    def test_unknown_requested_task(self):
        with pytest.raises(TaskGraphError, match="Unknown task 'nope'"):
            TaskGraph().schedule(["nope"])

    def test_unknown_dependency(self):
        graph = _graph(Recorder(), "a")
        graph["a"].depends("ghost")
        with pytest.raises(TaskGraphError, match="ghost"):
            graph.schedule(["a"])

    def test_unknown_must_run_after(self):
        graph = _graph(Recorder(), "a")
        graph["a"].runs_after("ghost")
        with pytest.raises(TaskGraphError, match="ghost"):
            graph.schedule(["a"])

    def test_cycle(self):
        graph = _graph(Recorder(), "a", "b")
        graph["a"].depends("b")
        graph["b"].runs_after("a")
        with pytest.raises(TaskGraphError, match="cycle"):
            graph.schedule(["a"])


# =============================================================================
# Execution
# =============================================================================


class TestExecute:
    def test_runs_in_dependency_order(self):
        recorder = Recorder()
        graph = _graph(recorder, "a", "b", "c")
        graph["c"].depends("b")
        graph["b"].depends("a")
        result = graph.execute(["c"])
        assert recorder.started() == ["a", "b", "c"]
        assert result.order == ("a", "b", "c")
        assert result.executed == ("a", "b", "c")
        assert set(result.outcomes.values()) == {TaskOutcome.EXECUTED}

    def test_each_task_runs_once(self):
        recorder = Recorder()
        graph = _graph(recorder, "base", "left", "right", "top")
        graph["left"].depends("base")
        graph["right"].depends("base")
        graph["top"].depends("left", "right")
        graph.execute(["top", "left"])
        assert sorted(recorder.started()) == ["base", "left", "right", "top"]

    def test_must_run_after_finishes_first(self):
        recorder = Recorder()
        graph = _graph(recorder, "stage", "launch")
        graph["launch"].runs_after("stage")
        graph.execute(["launch", "stage"])
        assert recorder.index("finish", "stage") < recorder.index("start", "launch")

    def test_skipped_task_unblocks_successors(self):
        recorder = Recorder()
        graph = TaskGraph()
        graph.register("stage", recorder.action("stage"), only_if=lambda: False)
        graph.register("launch", recorder.action("launch")).runs_after("stage")
        result = graph.execute(["stage", "launch"])
        assert result.outcomes == {
            "stage": TaskOutcome.SKIPPED,
            "launch": TaskOutcome.EXECUTED,
        }
        assert result.skipped == ("stage",)
        assert recorder.started() == ["launch"]

    def test_only_if_evaluated_at_run_time(self):
        state = {"ready": False}
        graph = TaskGraph()
        graph.register("produce", lambda: state.update(ready=True))
        graph.register("consume", lambda: None, only_if=lambda: state["ready"]).depends("produce")
        result = graph.execute(["consume"])
        assert result.outcomes["consume"] is TaskOutcome.EXECUTED

    def test_independent_tasks_run_concurrently(self):
        barrier = threading.Barrier(2, timeout=5)
        graph = TaskGraph()
        graph.register("fetch", barrier.wait)
        graph.register("inject", barrier.wait)
        result = graph.execute(["fetch", "inject"], max_workers=2)
        assert set(result.executed) == {"fetch", "inject"}

    def test_failure_stops_downstream(self):
        recorder = Recorder()
        graph = _graph(recorder, "a", "c")
        cause = RuntimeError("boom")

        def fail():
            raise cause

        graph.register("b", fail, description="breaks")
        graph["b"].depends("a")
        graph["c"].depends("b")

        with pytest.raises(TaskFailedError) as exc_info:
            graph.execute(["c"])

        err = exc_info.value
        assert err.task_name == "b"
        assert err.description == "breaks"
        assert err.__cause__ is cause
        assert "c" not in recorder.started()

    def test_failure_does_not_dispatch_new_work(self):
        recorder = Recorder()
        graph = TaskGraph()

        def fail():
            raise ValueError("bad")

        graph.register("fails", fail)
        graph.register("later", recorder.action("later")).runs_after("fails")
        with pytest.raises(TaskFailedError, match="bad"):
            graph.execute(["fails", "later"], max_workers=1)
        assert recorder.started() == []

    def test_interrupt_terminates_processes(self, monkeypatch):
        terminated = []
        monkeypatch.setattr(_task_graph, "terminate_all", lambda: terminated.append(True) or 0)

        def interrupted():
            raise KeyboardInterrupt

        graph = TaskGraph()
        graph.register("server", interrupted)
        with pytest.raises(KeyboardInterrupt):
            graph.execute(["server"])
        assert terminated == [True]
