"""JUnit XML rendering: document types, renderer and output helpers."""

from gtreport.junit.output import format_output, merge_benchmarks, trim_output_prefix
from gtreport.junit.renderer import to_junit
from gtreport.junit.schema import Testcase, Testsuite, Testsuites, to_xml, write_xml

__all__ = [
    "Testcase",
    "Testsuite",
    "Testsuites",
    "format_output",
    "merge_benchmarks",
    "to_junit",
    "to_xml",
    "trim_output_prefix",
    "write_xml",
]
