import threading

import pytest

from conftest import RecordingRunner
from sokol_build.graph import (
    Action,
    BuildGraph,
    BuildNode,
    CommandAction,
    GraphScheduler,
    NodeKind,
    NodeState,
)
from sokol_build.sokol_types.exceptions import ExternalProcessError, GraphError


class RecordingAction(Action):
    def __init__(self, name, log, fail=False, barrier=None):
        self.name = name
        self.log = log
        self.fail = fail
        self.barrier = barrier
        self.returncode = None

    def execute(self, runner):
        if self.barrier is not None:
            self.barrier.wait()
        self.log.append(self.name)
        if self.fail:
            self.returncode = 2
            raise ExternalProcessError([self.name], 2)
        self.returncode = 0

    def describe(self):
        return [self.name]


def _node(name, log, **kwargs):
    outputs = kwargs.pop("outputs", None)
    return BuildNode(name, NodeKind.COMPILE, RecordingAction(name, log, **kwargs), outputs=outputs)


def test_duplicate_node_name():
    graph = BuildGraph()
    graph.add(_node("a", []))
    with pytest.raises(GraphError, match="Duplicate"):
        graph.add(_node("a", []))


def test_duplicate_output(tmp_path):
    graph = BuildGraph()
    graph.add(_node("a", [], outputs=[tmp_path / "out.o"]))
    with pytest.raises(GraphError, match="already produced"):
        graph.add(_node("b", [], outputs=[tmp_path / "sub" / ".." / "out.o"]))


def test_cycle_is_rejected():
    graph = BuildGraph()
    a = graph.add(_node("a", []))
    b = graph.add(_node("b", []))
    a.depend_on(b)
    b.depend_on(a)
    with pytest.raises(GraphError, match="cycle"):
        graph.topological_order()


def test_topological_order_keeps_registration_order():
    graph = BuildGraph()
    c = graph.add(_node("c", []))
    a = graph.add(_node("a", []))
    b = graph.add(_node("b", []))
    c.depend_on(b)
    assert [n.name for n in graph.topological_order()] == ["a", "b", "c"]


def test_plan_takes_closure_of_step():
    graph = BuildGraph()
    lib = graph.add(_node("lib", []))
    exe = graph.add(_node("exe", []))
    graph.add(_node("unrelated", []))
    exe.depend_on(lib)
    graph.step("run", "Run it").depend_on(exe)
    assert [n.name for n in graph.plan(["run"])] == ["lib", "exe"]


def test_unknown_step_lists_available():
    graph = BuildGraph()
    graph.step("install", "Default")
    with pytest.raises(GraphError, match="install"):
        graph.get_step("deploy")


def test_depend_on_ignores_none():
    node = _node("a", [])
    node.depend_on(None)
    assert node.dependencies == []


def test_dependencies_run_first(logger):
    log = []
    graph = BuildGraph()
    a = graph.add(_node("a", log))
    b = graph.add(_node("b", log))
    c = graph.add(_node("c", log))
    c.depend_on(a, b)
    report = GraphScheduler(RecordingRunner(logger), logger, jobs=4).execute(graph.topological_order())
    assert report.succeeded
    assert log[-1] == "c"
    assert set(log[:2]) == {"a", "b"}


def test_failure_skips_dependents_but_not_siblings(logger):
    log = []
    graph = BuildGraph()
    setup = graph.add(_node("setup", log, fail=True))
    lib = graph.add(_node("lib", log))
    link = graph.add(_node("link", log))
    other = graph.add(_node("other", log))
    lib.depend_on(setup)
    link.depend_on(lib)

    report = GraphScheduler(RecordingRunner(logger), logger, jobs=2).execute(graph.topological_order())

    assert not report.succeeded
    assert report.states["setup"] is NodeState.FAILED
    assert report.states["lib"] is NodeState.SKIPPED
    assert report.states["link"] is NodeState.SKIPPED
    assert report.states["other"] is NodeState.SUCCEEDED
    assert "lib" not in log and "link" not in log
    assert report.exit_code("setup") == 2
    assert report.exit_code("link") == 1


def test_failed_node_is_not_retried(logger):
    log = []
    graph = BuildGraph()
    graph.add(_node("flaky", log, fail=True))
    GraphScheduler(RecordingRunner(logger), logger, jobs=1).execute(graph.topological_order())
    assert log == ["flaky"]


def test_independent_nodes_run_concurrently(logger):
    log = []
    barrier = threading.Barrier(2, timeout=5)
    graph = BuildGraph()
    graph.add(_node("left", log, barrier=barrier))
    graph.add(_node("right", log, barrier=barrier))
    report = GraphScheduler(RecordingRunner(logger), logger, jobs=2).execute(graph.topological_order())
    assert report.succeeded
    assert sorted(log) == ["left", "right"]


def test_command_action_records_exit_code(logger, tmp_path):
    runner = RecordingRunner(logger, failures={"sample": 3})
    graph = BuildGraph()
    graph.add(BuildNode("exec", NodeKind.RUN, CommandAction([tmp_path / "sample"])))
    report = GraphScheduler(runner, logger).execute(graph.topological_order())
    assert report.states["exec"] is NodeState.FAILED
    assert report.exit_code("exec") == 3


def test_dry_run_creates_nothing(logger, tmp_path):
    runner = RecordingRunner(logger)
    runner.dry_run = True
    out_dir = tmp_path / "out"
    action = CommandAction(["cc", "-c", "x.c"], make_dirs=[out_dir])
    action.execute(runner)
    assert not out_dir.exists()
    assert runner.commands == [["cc", "-c", "x.c"]]


def test_empty_plan_succeeds(logger):
    report = GraphScheduler(RecordingRunner(logger), logger).execute([])
    assert report.succeeded
    assert report.states == {}
