"""Test report data model.

A Report is a tree of Packages, each holding its Tests, Benchmarks and
the optional build or run Error of the package.  Reports are assembled
by :mod:`gtreport.report.builder` and only read afterwards.

Durations are in seconds.  Results use the string constants below.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Test and benchmark results
PASS = "pass"
FAIL = "fail"
SKIP = "skip"
UNKNOWN = "unknown"

# Result tokens printed by go test, lowercased
_RESULT_TOKENS: dict[str, str] = {
    "pass": PASS,
    "ok": PASS,
    "fail": FAIL,
    "skip": SKIP,
    "?": SKIP,
}


def parse_result(token: str) -> str:
    """Map a result token from the tool output onto a result constant.

    Args:
        token: Raw token such as ``"PASS"``, ``"ok"``, ``"FAIL"`` or ``"?"``.

    Returns:
        One of PASS, FAIL, SKIP; UNKNOWN for anything unrecognized.
    """
    return _RESULT_TOKENS.get(token.strip().lower(), UNKNOWN)


@dataclass
class Test:
    """A single test or subtest.

    ``level`` is the subtest nesting depth (0 for top-level tests).  A test
    that never received an end event keeps the UNKNOWN result.
    """

    name: str
    duration: float = 0.0
    result: str = UNKNOWN
    level: int = 0
    output: list[str] = field(default_factory=list)


@dataclass
class Benchmark:
    """A single benchmark run."""

    name: str
    result: str = PASS
    output: list[str] = field(default_factory=list)
    iterations: int = 0
    ns_per_op: float = 0.0
    mb_per_sec: float = 0.0
    bytes_per_op: int = 0
    allocs_per_op: int = 0


@dataclass
class Error:
    """A build or run failure that happened outside any single test.

    An Error with an empty name means there was no such failure.
    """

    name: str = ""
    duration: float = 0.0
    cause: str = ""
    output: list[str] = field(default_factory=list)

    @property
    def present(self) -> bool:
        return self.name != ""


@dataclass
class Package:
    """A tested package.

    A zero ``duration`` means the duration was not reported and should be
    derived from the tests; a zero ``coverage`` means no coverage was
    reported.
    """

    name: str
    duration: float = 0.0
    coverage: float = 0.0
    output: list[str] = field(default_factory=list)
    tests: list[Test] = field(default_factory=list)
    benchmarks: list[Benchmark] = field(default_factory=list)
    build_error: Error = field(default_factory=Error)
    run_error: Error = field(default_factory=Error)


@dataclass
class Report:
    """Top-level container of all tested packages.

    ``warnings`` holds diagnostics collected while building the report,
    e.g. unhandled event types.  They never affect success.
    """

    packages: list[Package] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def is_successful(self) -> bool:
        """True if no package errored and every test passed or was skipped."""
        for pkg in self.packages:
            if pkg.build_error.present or pkg.run_error.present:
                return False
            for test in pkg.tests:
                if test.result not in (PASS, SKIP):
                    return False
        return True
