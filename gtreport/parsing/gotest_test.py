"""Tests for the go test output scanner."""

from __future__ import annotations

import pytest

from gtreport.parsing import event as ev
from gtreport.parsing.event import Event
from gtreport.parsing.gotest import iter_events, parse_gotest, parse_line


class TestTestLines:
    """Tests for RUN/PAUSE/CONT and end lines."""

    @pytest.mark.parametrize("line,etype", [
        ("=== RUN   TestA", ev.RUN_TEST),
        ("=== PAUSE TestA", ev.PAUSE_TEST),
        ("=== CONT  TestA", ev.CONT_TEST),
        ("=== NAME  TestA", ev.CONT_TEST),
    ])
    def test_test_events(self, line, etype):
        """Test progress lines map to their event types."""
        assert parse_line(line) == [Event(type=etype, name="TestA")]

    def test_run_subtest(self):
        assert parse_line("=== RUN   TestA/sub_case") == [
            Event(type=ev.RUN_TEST, name="TestA/sub_case"),
        ]

    def test_end_test(self):
        """End lines carry result, duration and indent."""
        (event,) = parse_line("--- FAIL: TestA (1.25s)")
        assert event.type == ev.END_TEST
        assert event.name == "TestA"
        assert event.result == "FAIL"
        assert event.duration == 1.25
        assert event.indent == 0

    def test_end_subtest_indent(self):
        """Each four-space group of indentation is one level."""
        (event,) = parse_line("        --- PASS: TestA/b/c (0.00s)")
        assert event.name == "TestA/b/c"
        assert event.indent == 2

    def test_end_test_old_format(self):
        """Older go versions print durations in seconds."""
        (event,) = parse_line("--- SKIP: TestA (0.50 seconds)")
        assert event.result == "SKIP"
        assert event.duration == 0.5

    def test_bench_footer(self):
        """BENCH footers drop the GOMAXPROCS suffix."""
        (event,) = parse_line("--- BENCH: BenchmarkX-8")
        assert event.type == ev.END_TEST
        assert event.name == "BenchmarkX"
        assert event.result == "BENCH"


class TestPackageLines:
    """Tests for status, summary and coverage lines."""

    @pytest.mark.parametrize("line", ["PASS", "FAIL", "SKIP"])
    def test_status(self, line):
        assert parse_line(line) == [Event(type=ev.STATUS, result=line)]

    def test_summary_ok(self):
        """A passing summary has name, result and duration."""
        assert parse_line("ok  \texample.com/pkg\t0.012s") == [
            Event(type=ev.SUMMARY, name="example.com/pkg", result="ok", duration=0.012),
        ]

    def test_summary_cached(self):
        (event,) = parse_line("ok  \texample.com/pkg\t(cached)")
        assert event.name == "example.com/pkg"
        assert event.duration == 0.0

    def test_summary_build_failed(self):
        """The bracketed cause becomes the event data."""
        (event,) = parse_line("FAIL\texample.com/bad [build failed]")
        assert event.type == ev.SUMMARY
        assert event.name == "example.com/bad"
        assert event.result == "FAIL"
        assert event.data == "[build failed]"

    def test_summary_with_coverage(self):
        """Coverage on a summary line is emitted before the summary."""
        events = parse_line(
            "ok  \texample.com/pkg\t0.100s\tcoverage: 42.5% of statements in ./..."
        )
        assert [e.type for e in events] == [ev.COVERAGE, ev.SUMMARY]
        assert events[0].cov_pct == 42.5
        assert events[0].cov_packages == ("./...",)
        assert events[1].duration == 0.1

    def test_no_test_files(self):
        assert parse_line("?   \texample.com/cmd\t[no test files]") == [
            Event(type=ev.SUMMARY, name="example.com/cmd", result="?"),
        ]

    def test_coverage_line(self):
        """Standalone coverage lines list covered packages."""
        (event,) = parse_line("coverage: 80.0% of statements in a, b")
        assert event.type == ev.COVERAGE
        assert event.cov_pct == 80.0
        assert event.cov_packages == ("a", "b")


class TestOtherLines:
    """Tests for benchmarks, build output and plain output."""

    def test_benchmark_full(self):
        """All benchmark metrics are parsed."""
        (event,) = parse_line(
            "BenchmarkParse-8   \t  500000\t      2345 ns/op\t  12.50 MB/s\t    256 B/op\t       4 allocs/op"
        )
        assert event.type == ev.BENCHMARK
        assert event.name == "BenchmarkParse"
        assert event.iterations == 500000
        assert event.ns_per_op == 2345.0
        assert event.mb_per_sec == 12.5
        assert event.bytes_per_op == 256
        assert event.allocs_per_op == 4

    def test_benchmark_minimal(self):
        """MB/s, B/op and allocs/op are optional."""
        (event,) = parse_line("BenchmarkX \t1000\t1.5 ns/op")
        assert event.name == "BenchmarkX"
        assert event.ns_per_op == 1.5
        assert event.mb_per_sec == 0.0
        assert event.bytes_per_op == 0

    def test_build_output(self):
        """Build failure headers name the package."""
        assert parse_line("# example.com/bad") == [
            Event(type=ev.BUILD_OUTPUT, name="example.com/bad"),
        ]
        assert parse_line("# example.com/bad [example.com/bad.test]") == [
            Event(type=ev.BUILD_OUTPUT, name="example.com/bad"),
        ]

    def test_build_output_external_test_package(self):
        """An external test package is named after its test binary."""
        assert parse_line("# example.com/foo_test [example.com/foo.test]") == [
            Event(type=ev.BUILD_OUTPUT, name="example.com/foo"),
        ]

    @pytest.mark.parametrize("line", [
        "    a_test.go:12: some log",
        "panic: runtime error",
        "",
        "okay then",
        "\tindented with tab",
    ])
    def test_plain_output(self, line):
        """Unrecognized lines are passed on verbatim."""
        assert parse_line(line) == [Event(type=ev.OUTPUT, data=line)]

    def test_line_terminator_removed(self):
        assert parse_line("some output\r\n") == [Event(type=ev.OUTPUT, data="some output")]


class TestParseGotest:
    """Tests for scanning whole logs."""

    def test_string_input(self):
        """A string is split into lines."""
        events = parse_gotest("=== RUN   TestA\n--- PASS: TestA (0.00s)\nPASS\n")
        assert [e.type for e in events] == [ev.RUN_TEST, ev.END_TEST, ev.STATUS]

    def test_iter_events_is_lazy(self):
        """iter_events consumes lines as events are requested."""
        consumed: list[str] = []

        def lines():
            for line in ["=== RUN   TestA", "hello"]:
                consumed.append(line)
                yield line

        it = iter_events(lines())
        assert next(it).type == ev.RUN_TEST
        assert consumed == ["=== RUN   TestA"]
