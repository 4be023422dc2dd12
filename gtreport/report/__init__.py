"""Test report model, report builder and YAML dump."""

from gtreport.report.builder import (
    BuilderState,
    Sink,
    apply_event,
    finalize,
    from_events,
    new_state,
)
from gtreport.report.model import (
    FAIL,
    PASS,
    SKIP,
    UNKNOWN,
    Benchmark,
    Error,
    Package,
    Report,
    Test,
    parse_result,
)
from gtreport.report.yaml_writer import report_to_dict, write_yaml

__all__ = [
    "FAIL",
    "PASS",
    "SKIP",
    "UNKNOWN",
    "Benchmark",
    "BuilderState",
    "Error",
    "Package",
    "Report",
    "Sink",
    "Test",
    "apply_event",
    "finalize",
    "from_events",
    "new_state",
    "parse_result",
    "report_to_dict",
    "write_yaml",
]
