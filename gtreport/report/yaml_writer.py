"""YAML dump of the intermediate Report.

Useful for inspecting how a go test log was interpreted before it is
flattened into JUnit: subtest levels, captured output per test and the
raw benchmark runs are all preserved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from gtreport.report.model import Benchmark, Error, Package, Report, Test


def _error_dict(err: Error) -> dict[str, Any] | None:
    if not err.present:
        return None
    return {
        "name": err.name,
        "duration_seconds": round(err.duration, 3),
        "cause": err.cause,
        "output": list(err.output),
    }


def _test_dict(test: Test) -> dict[str, Any]:
    return {
        "name": test.name,
        "result": test.result,
        "level": test.level,
        "duration_seconds": round(test.duration, 3),
        "output": list(test.output),
    }


def _benchmark_dict(bm: Benchmark) -> dict[str, Any]:
    return {
        "name": bm.name,
        "result": bm.result,
        "iterations": bm.iterations,
        "ns_per_op": bm.ns_per_op,
        "mb_per_sec": bm.mb_per_sec,
        "bytes_per_op": bm.bytes_per_op,
        "allocs_per_op": bm.allocs_per_op,
        "output": list(bm.output),
    }


def _package_dict(pkg: Package) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": pkg.name,
        "duration_seconds": round(pkg.duration, 3),
    }
    if pkg.coverage > 0:
        data["coverage"] = pkg.coverage
    if pkg.output:
        data["output"] = list(pkg.output)
    data["tests"] = [_test_dict(t) for t in pkg.tests]
    if pkg.benchmarks:
        data["benchmarks"] = [_benchmark_dict(b) for b in pkg.benchmarks]
    build_error = _error_dict(pkg.build_error)
    if build_error:
        data["build_error"] = build_error
    run_error = _error_dict(pkg.run_error)
    if run_error:
        data["run_error"] = run_error
    return data


def report_to_dict(report: Report) -> dict[str, Any]:
    """Convert a Report to plain data suitable for YAML serialization.

    Returns:
        Dict with a single ``report`` key.
    """
    data: dict[str, Any] = {
        "successful": report.is_successful(),
        "packages": [_package_dict(p) for p in report.packages],
    }
    if report.warnings:
        data["warnings"] = list(report.warnings)
    return {"report": data}


def write_yaml(report: Report, path: Path) -> None:
    """Write the report as a YAML file.

    Args:
        report: The finished report.
        path: File path to write the YAML report to.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(
            report_to_dict(report),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
