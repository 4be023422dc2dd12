"""Output normalization and benchmark aggregation for JUnit rendering."""

from __future__ import annotations

from gtreport.report.model import FAIL, PASS, Benchmark

# go test indents the output of a test by one group per nesting level
INDENT = "    "


def trim_output_prefix(line: str, level: int) -> str:
    """Remove the indentation go test adds to output of a (sub)test.

    Only a leading run of spaces whose length is a multiple of four is
    treated as tool indentation; up to ``level + 1`` groups of four spaces
    are removed from it.  Lines that are blank or indented some other way
    are kept as genuine program output.  A single leading tab is removed
    in either case.

    Args:
        line: Output line as captured.
        level: Nesting level of the test that owns the line.

    Returns:
        The line without the tool-added prefix.
    """
    stripped = line.lstrip(" ")
    prefix_len = len(line) - len(stripped)
    if stripped and prefix_len % 4 == 0:
        for _ in range(level + 1):
            if line.startswith(INDENT):
                line = line[len(INDENT):]
    if line.startswith("\t"):
        line = line[1:]
    return line


def format_output(lines: list[str], level: int) -> str:
    """Trim every line for *level* and join them with newlines."""
    return "\n".join(trim_output_prefix(line, level) for line in lines)


def merge_benchmarks(benchmarks: list[Benchmark]) -> list[Benchmark]:
    """Merge repeated runs of the same benchmark into one averaged row.

    Rows keep the order in which each name was first seen.  ns/op and MB/s
    are averaged; B/op and allocs/op use the integer mean.  Iteration
    counts and output are not carried over.  A row fails if any of its
    runs failed.

    Args:
        benchmarks: Benchmark runs in report order.

    Returns:
        One Benchmark per distinct name.
    """
    groups: dict[str, list[Benchmark]] = {}
    for bm in benchmarks:
        groups.setdefault(bm.name, []).append(bm)

    merged: list[Benchmark] = []
    for name, runs in groups.items():
        n = len(runs)
        merged.append(Benchmark(
            name=name,
            result=FAIL if any(b.result == FAIL for b in runs) else PASS,
            ns_per_op=sum(b.ns_per_op for b in runs) / n,
            mb_per_sec=sum(b.mb_per_sec for b in runs) / n,
            bytes_per_op=sum(b.bytes_per_op for b in runs) // n,
            allocs_per_op=sum(b.allocs_per_op for b in runs) // n,
        ))
    return merged
