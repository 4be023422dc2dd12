"""Scanner for ``go test`` text output.

Turns each line of ``go test`` (or ``go test -v``) output into one or two
:class:`Event` objects.  Lines are matched against a fixed set of
patterns; anything that does not match is passed on as an ``output``
event, so the scanner never rejects input.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator

from gtreport.parsing import event as ev
from gtreport.parsing.event import Event

# === RUN TestName, === PAUSE, === CONT, === NAME
_RE_TEST_EVENT = re.compile(r"^=== (RUN|PAUSE|CONT|NAME)\s+(.+?)\s*$")

# --- FAIL: TestName (0.01s), indented by four spaces per subtest level
_RE_END_TEST = re.compile(
    r"^((?:    )*)--- (PASS|FAIL|SKIP|BENCH): (.+?)"
    r"(?: \((\d+(?:\.\d+)?)(?:s| seconds)\))?\s*$"
)

# PASS / FAIL / SKIP printed by the test binary when it exits
_RE_STATUS = re.compile(r"^(PASS|FAIL|SKIP)$")

# ok    pkg  0.01s  coverage: 50.0% of statements
# FAIL  pkg [build failed]
_RE_SUMMARY = re.compile(
    r"^(ok|FAIL)\s+(\S+)"
    r"(?:\s+(?:(\d+\.\d+)s|\(cached\)))?"
    r"(?:\s+(\[[^\]]+\]))?"
    r"(?:\s+coverage:\s+(?:(\d+\.\d+)% of statements(?: in (.+?))?|\[no statements\]))?"
    r"\s*$"
)

# ?     pkg  [no test files]
_RE_NO_TEST_FILES = re.compile(r"^\?\s+(\S+)\s+\[no test files\]\s*$")

_RE_COVERAGE = re.compile(
    r"^coverage:\s+(\d+\.\d+)% of statements(?: in (.+?))?\s*$"
)

# BenchmarkName-8   1000   123 ns/op   4.5 MB/s   16 B/op   2 allocs/op
_RE_BENCHMARK = re.compile(
    r"^(Benchmark\S*?)(?:-\d+)?\s+(\d+)\s+(\d+(?:\.\d+)?)\s+ns/op"
    r"(?:\s+(\d+(?:\.\d+)?)\s+MB/s)?"
    r"(?:\s+(\d+)\s+B/op)?"
    r"(?:\s+(\d+)\s+allocs/op)?"
)

# # pkg  or  # pkg [pkg.test]  or  # pkg_test [pkg.test]
_RE_BUILD_OUTPUT = re.compile(r"^# (\S+)(?: \[(\S+)\])?\s*$")

_TEST_BINARY_SUFFIX = ".test"

# GOMAXPROCS suffix of benchmark names
_RE_PROCS_SUFFIX = re.compile(r"-\d+$")

_TEST_EVENT_TYPES = {
    "RUN": ev.RUN_TEST,
    "PAUSE": ev.PAUSE_TEST,
    "CONT": ev.CONT_TEST,
    "NAME": ev.CONT_TEST,
}


def _split_packages(text: str | None) -> tuple[str, ...]:
    if not text:
        return ()
    return tuple(p.strip() for p in text.split(",") if p.strip())


def _benchmark_name(name: str) -> str:
    if name.startswith("Benchmark"):
        return _RE_PROCS_SUFFIX.sub("", name)
    return name


def _build_package(name: str, binary: str | None) -> str:
    """Name of the package whose summary a build failure belongs to.

    External test packages build as ``pkg_test [pkg.test]`` but the
    summary line names ``pkg``, so the test binary name wins.
    """
    if binary and binary.endswith(_TEST_BINARY_SUFFIX):
        return binary[:-len(_TEST_BINARY_SUFFIX)]
    return name


def parse_line(line: str) -> list[Event]:
    """Scan a single line of go test output.

    Args:
        line: One output line, with or without its line terminator.

    Returns:
        The events for the line, in order.  Summary lines that report
        coverage produce a ``coverage`` event before the ``summary``.
    """
    line = line.rstrip("\r\n")

    m = _RE_TEST_EVENT.match(line)
    if m:
        return [Event(type=_TEST_EVENT_TYPES[m.group(1)], name=m.group(2))]

    m = _RE_END_TEST.match(line)
    if m:
        return [Event(
            type=ev.END_TEST,
            name=_benchmark_name(m.group(3)),
            result=m.group(2),
            duration=float(m.group(4) or 0),
            indent=len(m.group(1)) // 4,
        )]

    m = _RE_STATUS.match(line)
    if m:
        return [Event(type=ev.STATUS, result=m.group(1))]

    m = _RE_SUMMARY.match(line)
    if m:
        events: list[Event] = []
        if m.group(5):
            events.append(Event(
                type=ev.COVERAGE,
                cov_pct=float(m.group(5)),
                cov_packages=_split_packages(m.group(6)),
            ))
        events.append(Event(
            type=ev.SUMMARY,
            name=m.group(2),
            result=m.group(1),
            duration=float(m.group(3) or 0),
            data=m.group(4) or "",
        ))
        return events

    m = _RE_NO_TEST_FILES.match(line)
    if m:
        return [Event(type=ev.SUMMARY, name=m.group(1), result="?")]

    m = _RE_COVERAGE.match(line)
    if m:
        return [Event(
            type=ev.COVERAGE,
            cov_pct=float(m.group(1)),
            cov_packages=_split_packages(m.group(2)),
        )]

    m = _RE_BENCHMARK.match(line)
    if m:
        return [Event(
            type=ev.BENCHMARK,
            name=m.group(1),
            iterations=int(m.group(2)),
            ns_per_op=float(m.group(3)),
            mb_per_sec=float(m.group(4) or 0),
            bytes_per_op=int(m.group(5) or 0),
            allocs_per_op=int(m.group(6) or 0),
        )]

    m = _RE_BUILD_OUTPUT.match(line)
    if m:
        return [Event(
            type=ev.BUILD_OUTPUT,
            name=_build_package(m.group(1), m.group(2)),
        )]

    return [Event(type=ev.OUTPUT, data=line)]


def iter_events(lines: Iterable[str]) -> Iterator[Event]:
    """Lazily scan go test output, yielding events in line order."""
    for line in lines:
        yield from parse_line(line)


def parse_gotest(lines: list[str] | str) -> list[Event]:
    """Scan go test output into a list of events.

    Args:
        lines: List of output lines, or a single string (split on newlines).

    Returns:
        All events in order.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    return list(iter_events(lines))
