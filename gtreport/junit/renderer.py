"""Render a Report as a JUnit XML document.

Each package becomes one testsuite.  Tests and (merged) benchmarks become
testcases.  JUnit has no way of saying that a suite failed before or
outside its tests, so build and run errors are rendered as one synthetic
failing testcase each.
"""

from __future__ import annotations

import datetime
import re

from gtreport.junit.output import format_output, merge_benchmarks
from gtreport.junit.schema import (
    Output,
    Result,
    Testcase,
    Testsuite,
    Testsuites,
    format_benchmark_time,
    format_duration,
)
from gtreport.report.model import FAIL, SKIP, UNKNOWN, Package, Report

# Output keys reported as suite properties, e.g. "goos: linux"
DEFAULT_PROPERTY_KEYS = ("goos", "goarch", "pkg")

COVERAGE_PROPERTY = "coverage.statements.pct"

_PROPERTY_SEPARATORS = re.compile(r"[: ]+")


def format_timestamp(now: datetime.datetime) -> str:
    """Format an instant as RFC 3339, e.g. ``2024-01-02T15:04:05Z``.

    Naive datetimes are taken to be in local time.
    """
    if now.tzinfo is None:
        now = now.astimezone()
    text = now.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-len("+00:00")] + "Z"
    return text


def _property_fields(line: str) -> list[str]:
    """Split a line on colons and spaces, dropping empty fields."""
    return [f for f in _PROPERTY_SEPARATORS.split(line) if f]


def _test_cases(pkg: Package) -> list[Testcase]:
    cases: list[Testcase] = []
    for test in pkg.tests:
        tc = Testcase(
            name=test.name,
            classname=pkg.name,
            time=format_duration(test.duration),
        )
        if test.result == FAIL:
            tc.failure = Result(
                message="Failed",
                data=format_output(test.output, test.level),
            )
        elif test.result == SKIP:
            tc.skipped = Result(message=format_output(test.output, test.level))
        elif test.result == UNKNOWN:
            tc.error = Result(
                message="No test result found",
                data=format_output(test.output, test.level),
            )
        cases.append(tc)
    return cases


def _benchmark_cases(pkg: Package) -> list[Testcase]:
    cases: list[Testcase] = []
    for bm in merge_benchmarks(pkg.benchmarks):
        # Whole nanoseconds, in seconds
        tc = Testcase(
            name=bm.name,
            classname=pkg.name,
            time=format_benchmark_time(int(bm.ns_per_op) / 1e9),
        )
        if bm.result == FAIL:
            tc.failure = Result(message="Failed")
        cases.append(tc)
    return cases


def _error_cases(pkg: Package) -> list[Testcase]:
    cases: list[Testcase] = []
    if pkg.build_error.present:
        cases.append(Testcase(
            name=pkg.build_error.cause,
            classname=pkg.build_error.name,
            time=format_duration(0),
            error=Result(
                message="Build error",
                data="\n".join(pkg.build_error.output),
            ),
        ))
    if pkg.run_error.present:
        cases.append(Testcase(
            name="Failure",
            classname=pkg.run_error.name,
            time=format_duration(0),
            error=Result(
                message="Run error",
                data="\n".join(pkg.run_error.output),
            ),
        ))
    return cases


def package_suite(
    pkg: Package,
    hostname: str,
    timestamp: str,
    properties: list[tuple[str, str]] | None = None,
    property_keys: tuple[str, ...] | list[str] = DEFAULT_PROPERTY_KEYS,
) -> Testsuite:
    """Render a single package as a testsuite.

    Args:
        pkg: The package to render.
        hostname: Hostname recorded on the suite.
        timestamp: Suite timestamp, already formatted.
        properties: Extra (name, value) properties added to the suite.
        property_keys: Output keys that are picked up as properties.

    Returns:
        The testsuite.
    """
    suite = Testsuite(name=pkg.name, timestamp=timestamp, hostname=hostname)

    if pkg.output:
        suite.system_out = Output(data=format_output(pkg.output, 0))

    for name, value in properties or []:
        suite.add_property(name, value)

    if pkg.coverage > 0:
        suite.add_property(COVERAGE_PROPERTY, f"{pkg.coverage:.2f}")

    for line in pkg.output:
        fields = _property_fields(line)
        if len(fields) == 2 and fields[0] in property_keys:
            suite.add_property(fields[0], fields[1])

    for tc in _test_cases(pkg) + _benchmark_cases(pkg) + _error_cases(pkg):
        suite.add_testcase(tc)

    # Benchmarks do not count towards the suite duration
    duration = pkg.duration
    if duration == 0:
        duration = sum(test.duration for test in pkg.tests)
    suite.time = format_duration(duration)
    return suite


def to_junit(
    report: Report,
    hostname: str,
    now: datetime.datetime,
    properties: list[tuple[str, str]] | None = None,
    property_keys: tuple[str, ...] | list[str] = DEFAULT_PROPERTY_KEYS,
) -> Testsuites:
    """Convert a Report into a JUnit document.

    The hostname and time are supplied by the caller and copied into
    every suite unchanged; nothing here reads the clock or the host.

    Args:
        report: The finished report.
        hostname: Hostname recorded on every suite.
        now: Instant recorded as the timestamp of every suite.
        properties: Extra (name, value) properties for every suite.
        property_keys: Output keys picked up as suite properties.

    Returns:
        The JUnit document.
    """
    timestamp = format_timestamp(now)

    suites = Testsuites()
    for pkg in report.packages:
        suites.add_suite(package_suite(
            pkg,
            hostname,
            timestamp,
            properties=properties,
            property_keys=property_keys,
        ))
    return suites
