"""Report builder: folds an ordered event stream into a Report.

The builder state is an explicit value.  ``apply_event()`` applies one
event to it and ``finalize()`` turns it into a :class:`Report`, so every
transition can be exercised on its own.  The builder never rejects
input: unhandled event types are recorded as warnings, tests that never
end keep the ``unknown`` result, and output lines are never dropped.

Output lines are routed to the *active sink*, an explicit tagged value
naming the package, a test, a benchmark or an open build error.  Tests,
benchmarks and build errors share one id space; ids are never reused
within a build, so a sink id stays unambiguous even after a package has
been flushed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from gtreport.parsing import event as ev
from gtreport.parsing.event import Event
from gtreport.report.model import (
    FAIL,
    PASS,
    UNKNOWN,
    Benchmark,
    Error,
    Package,
    Report,
    Test,
    parse_result,
)

# Active sink kinds
SINK_PACKAGE = "package"
SINK_TEST = "test"
SINK_BENCHMARK = "benchmark"
SINK_BUILD_ERROR = "build_error"


@dataclass(frozen=True)
class Sink:
    """The structure currently receiving output lines."""

    kind: str
    id: int = 0


PACKAGE_SINK = Sink(SINK_PACKAGE)


@dataclass
class BuilderState:
    """Everything the builder carries from one event to the next.

    ``tests``, ``benchmarks``, ``output`` and ``coverage`` belong to the
    package currently being built and are reset when it is flushed.
    ``build_errors`` is kept across packages: go prints build failures
    well before the summary line of the package they belong to.
    """

    package_name: str = ""
    packages: list[Package] = field(default_factory=list)
    tests: dict[int, Test] = field(default_factory=dict)
    benchmarks: dict[int, Benchmark] = field(default_factory=dict)
    build_errors: dict[int, Error] = field(default_factory=dict)
    ended: set[int] = field(default_factory=set)
    paused: set[int] = field(default_factory=set)
    output: list[str] = field(default_factory=list)
    coverage: float = 0.0
    sink: Sink = PACKAGE_SINK
    next_id: int = 1
    warnings: list[str] = field(default_factory=list)

    def new_id(self) -> int:
        id_ = self.next_id
        self.next_id += 1
        return id_

    @property
    def has_pending(self) -> bool:
        """True if anything was collected since the last package flush."""
        return bool(self.tests or self.benchmarks or self.output)


def new_state(package_name: str = "") -> BuilderState:
    """Create an empty builder state.

    Args:
        package_name: Name given to packages whose summary line carries
            no name, and to the package flushed at end of stream.
    """
    return BuilderState(package_name=package_name)


def _find_running(state: BuilderState, name: str) -> int | None:
    """Return the id of the most recent not yet ended test called *name*."""
    for id_ in reversed(list(state.tests)):
        if id_ not in state.ended and state.tests[id_].name == name:
            return id_
    return None


def _find_benchmark(state: BuilderState, name: str) -> int | None:
    for id_ in reversed(list(state.benchmarks)):
        if state.benchmarks[id_].name == name:
            return id_
    return None


def _enclosing_sink(state: BuilderState, name: str) -> Sink:
    """Sink of the nearest running, unpaused parent of test *name*."""
    for id_ in reversed(list(state.tests)):
        if id_ in state.ended or id_ in state.paused:
            continue
        if name.startswith(state.tests[id_].name + "/"):
            return Sink(SINK_TEST, id_)
    return PACKAGE_SINK


def _has_failure(state: BuilderState) -> bool:
    return any(t.result == FAIL for t in state.tests.values()) or any(
        b.result == FAIL for b in state.benchmarks.values()
    )


def _run_test(state: BuilderState, event: Event) -> None:
    id_ = state.new_id()
    state.tests[id_] = Test(name=event.name)
    state.sink = Sink(SINK_TEST, id_)


def _pause_test(state: BuilderState, event: Event) -> None:
    id_ = _find_running(state, event.name)
    if id_ is not None:
        state.paused.add(id_)
    state.sink = PACKAGE_SINK


def _cont_test(state: BuilderState, event: Event) -> None:
    id_ = _find_running(state, event.name)
    if id_ is None:
        state.sink = PACKAGE_SINK
        return
    state.paused.discard(id_)
    state.sink = Sink(SINK_TEST, id_)


def _end_test(state: BuilderState, event: Event) -> None:
    result = parse_result(event.result)
    id_ = _find_running(state, event.name)
    if id_ is None:
        # Footer of a benchmark, e.g. "--- FAIL: BenchmarkX"
        bm_id = _find_benchmark(state, event.name)
        if bm_id is not None:
            if result != UNKNOWN:
                state.benchmarks[bm_id].result = result
            state.sink = Sink(SINK_BENCHMARK, bm_id)
            return
        # go test without -v prints no RUN line; the test's log follows
        # its end line instead
        id_ = state.new_id()
        state.tests[id_] = Test(name=event.name)
        sink = Sink(SINK_TEST, id_)
    else:
        sink = _enclosing_sink(state, event.name)

    test = state.tests[id_]
    test.result = result
    test.duration = event.duration
    test.level = event.indent
    state.ended.add(id_)
    state.paused.discard(id_)
    state.sink = sink


def _benchmark(state: BuilderState, event: Event) -> None:
    id_ = state.new_id()
    state.benchmarks[id_] = Benchmark(
        name=event.name,
        result=PASS,
        iterations=event.iterations,
        ns_per_op=event.ns_per_op,
        mb_per_sec=event.mb_per_sec,
        bytes_per_op=event.bytes_per_op,
        allocs_per_op=event.allocs_per_op,
    )
    state.sink = Sink(SINK_BENCHMARK, id_)


def _status(state: BuilderState, event: Event) -> None:
    state.sink = PACKAGE_SINK


def _summary(state: BuilderState, event: Event) -> None:
    """Flush the current package.

    A pending build error with the same name becomes the package's build
    error.  Otherwise a failing summary without any failing test or
    benchmark becomes a run error that takes over the package output.
    """
    name = event.name or state.package_name
    pkg = Package(name=name, duration=event.duration, coverage=state.coverage)
    output = state.output

    build_id = next(
        (id_ for id_, err in state.build_errors.items() if err.name == name),
        None,
    )
    if build_id is not None:
        build_error = state.build_errors.pop(build_id)
        build_error.duration = event.duration
        build_error.cause = event.data
        pkg.build_error = build_error
    elif parse_result(event.result) == FAIL and not _has_failure(state):
        pkg.run_error = Error(name=name, cause=event.data, output=output)
        output = []

    pkg.output = output
    pkg.tests = list(state.tests.values())
    pkg.benchmarks = list(state.benchmarks.values())
    state.packages.append(pkg)

    state.tests = {}
    state.benchmarks = {}
    state.ended = set()
    state.paused = set()
    state.output = []
    state.coverage = 0.0
    state.sink = PACKAGE_SINK


def _coverage(state: BuilderState, event: Event) -> None:
    state.coverage = event.cov_pct


def _build_output(state: BuilderState, event: Event) -> None:
    if state.tests or state.benchmarks:
        _summary(state, Event(ev.SUMMARY))
    id_ = state.new_id()
    state.build_errors[id_] = Error(name=event.name)
    state.sink = Sink(SINK_BUILD_ERROR, id_)


def _output(state: BuilderState, event: Event) -> None:
    sink = state.sink
    if sink.kind == SINK_TEST and sink.id in state.tests:
        state.tests[sink.id].output.append(event.data)
    elif sink.kind == SINK_BENCHMARK and sink.id in state.benchmarks:
        state.benchmarks[sink.id].output.append(event.data)
    elif sink.kind == SINK_BUILD_ERROR and sink.id in state.build_errors:
        state.build_errors[sink.id].output.append(event.data)
    else:
        state.output.append(event.data)


_TRANSITIONS: dict[str, Callable[[BuilderState, Event], None]] = {
    ev.RUN_TEST: _run_test,
    ev.PAUSE_TEST: _pause_test,
    ev.CONT_TEST: _cont_test,
    ev.END_TEST: _end_test,
    ev.BENCHMARK: _benchmark,
    ev.STATUS: _status,
    ev.SUMMARY: _summary,
    ev.COVERAGE: _coverage,
    ev.BUILD_OUTPUT: _build_output,
    ev.OUTPUT: _output,
}


def apply_event(state: BuilderState, event: Event) -> BuilderState:
    """Apply one event to the builder state.

    The given state is consumed: callers must continue with the returned
    state only.

    Args:
        state: Current builder state.
        event: Next event of the stream.

    Returns:
        The builder state after the event.
    """
    handler = _TRANSITIONS.get(event.type)
    if handler is None:
        state.warnings.append(f"unhandled event type: {event.type}")
        return state
    handler(state, event)
    return state


def finalize(state: BuilderState) -> Report:
    """Close the stream and return the finished Report.

    Anything collected after the last summary is flushed as one more
    package, so a truncated stream still yields its last package.  Build
    errors that no summary claimed are reported as packages of their own.
    """
    if state.has_pending:
        _summary(state, Event(ev.SUMMARY))

    for build_error in state.build_errors.values():
        state.warnings.append(
            f"build error for {build_error.name} has no matching package summary"
        )
        state.packages.append(
            Package(name=build_error.name, build_error=build_error)
        )
    state.build_errors = {}

    return Report(packages=state.packages, warnings=state.warnings)


def from_events(events: Iterable[Event], package_name: str = "") -> Report:
    """Build a Report from an ordered sequence of events.

    Args:
        events: Events in the order they were scanned.
        package_name: Default package name, see :func:`new_state`.

    Returns:
        The finished Report.
    """
    state = new_state(package_name)
    for event in events:
        state = apply_event(state, event)
    return finalize(state)
