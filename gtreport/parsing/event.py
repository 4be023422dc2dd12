"""Events produced by scanning go test output.

Each Event is one discrete, typed occurrence found in the tool output.
The ``type`` field is a plain string so that event kinds this version
does not know about can still be carried through the pipeline and
reported, instead of being rejected by the scanner or the builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Event kinds understood by the report builder
RUN_TEST = "run_test"
PAUSE_TEST = "pause_test"
CONT_TEST = "cont_test"
END_TEST = "end_test"
BENCHMARK = "benchmark"
STATUS = "status"
SUMMARY = "summary"
COVERAGE = "coverage"
BUILD_OUTPUT = "build_output"
OUTPUT = "output"


@dataclass(frozen=True)
class Event:
    """A single event in the go test output stream.

    Only the fields relevant to ``type`` are set; the rest keep their
    zero values.  ``result`` holds the raw result token printed by the
    tool (e.g. ``"PASS"``, ``"ok"``, ``"FAIL"``, ``"?"``); the builder
    normalizes it.  ``duration`` is in seconds and ``indent`` is the
    nesting depth of an ``end_test`` line.
    """

    type: str
    name: str = ""
    result: str = ""
    duration: float = 0.0
    indent: int = 0
    data: str = ""

    # benchmark
    iterations: int = 0
    ns_per_op: float = 0.0
    mb_per_sec: float = 0.0
    bytes_per_op: int = 0
    allocs_per_op: int = 0

    # coverage
    cov_pct: float = 0.0
    cov_packages: tuple[str, ...] = field(default_factory=tuple)
