"""JUnit XML document types and serialization.

The types follow the common JUnit XML convention understood by CI
systems: ``<testsuites>`` holding ``<testsuite>`` elements, each with
properties, captured output and ``<testcase>`` elements.  A testcase
carries at most one of ``<failure>``, ``<error>`` or ``<skipped>``.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import TextIO

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Characters that are not allowed anywhere in an XML 1.0 document
_INVALID_XML_CHARS = re.compile(
    "[^\x09\x0a\x0d\x20-\U0000d7ff\U0000e000-\U0000fffd\U00010000-\U0010ffff]"
)


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as a JUnit time value."""
    return f"{seconds:.3f}"


def format_benchmark_time(seconds: float) -> str:
    """Format a benchmark time, keeping nanosecond precision."""
    return f"{seconds:.9f}"


def _clean(text: str) -> str:
    return _INVALID_XML_CHARS.sub("\U0000fffd", text)


@dataclass
class Property:
    name: str
    value: str


@dataclass
class Result:
    """Contents of a failure, error or skipped element."""

    message: str = ""
    type: str = ""
    data: str = ""


@dataclass
class Output:
    data: str = ""


@dataclass
class Testcase:
    name: str
    classname: str
    time: str = ""
    skipped: Result | None = None
    error: Result | None = None
    failure: Result | None = None


@dataclass
class Testsuite:
    """A single suite; counters are kept in sync by ``add_testcase()``."""

    name: str
    tests: int = 0
    failures: int = 0
    errors: int = 0
    id: int = 0
    hostname: str = ""
    skipped: int = 0
    time: str = ""
    timestamp: str = ""
    properties: list[Property] = field(default_factory=list)
    testcases: list[Testcase] = field(default_factory=list)
    system_out: Output | None = None

    def add_property(self, name: str, value: str) -> None:
        self.properties.append(Property(name=name, value=value))

    def add_testcase(self, tc: Testcase) -> None:
        """Append a testcase and update the suite counters."""
        self.testcases.append(tc)
        self.tests += 1
        if tc.error is not None:
            self.errors += 1
        if tc.failure is not None:
            self.failures += 1
        if tc.skipped is not None:
            self.skipped += 1


@dataclass
class Testsuites:
    """The document root, aggregating the counters of its suites."""

    tests: int = 0
    errors: int = 0
    failures: int = 0
    skipped: int = 0
    suites: list[Testsuite] = field(default_factory=list)

    def add_suite(self, suite: Testsuite) -> None:
        """Append a suite, numbering it and adding up its counters."""
        suite.id = len(self.suites)
        self.suites.append(suite)
        self.tests += suite.tests
        self.errors += suite.errors
        self.failures += suite.failures
        self.skipped += suite.skipped


def _attrs(*pairs: tuple[str, str], optional: tuple[str, ...] = ()) -> dict[str, str]:
    """Build an attribute dict, dropping empty values of *optional* keys."""
    return {
        key: _clean(value)
        for key, value in pairs
        if value or key not in optional
    }


def _add_result(parent: ET.Element, tag: str, result: Result | None) -> None:
    if result is None:
        return
    el = ET.SubElement(parent, tag, _attrs(
        ("message", result.message),
        ("type", result.type),
        optional=("message", "type"),
    ))
    if result.data:
        el.text = _clean(result.data)


def _add_output(parent: ET.Element, tag: str, output: Output | None) -> None:
    if output is None:
        return
    el = ET.SubElement(parent, tag)
    el.text = _clean(output.data)


def _testcase_element(parent: ET.Element, tc: Testcase) -> None:
    el = ET.SubElement(parent, "testcase", _attrs(
        ("name", tc.name),
        ("classname", tc.classname),
        ("time", tc.time),
        optional=("time",),
    ))
    _add_result(el, "skipped", tc.skipped)
    _add_result(el, "error", tc.error)
    _add_result(el, "failure", tc.failure)


def _testsuite_element(parent: ET.Element, suite: Testsuite) -> None:
    el = ET.SubElement(parent, "testsuite", _attrs(
        ("name", suite.name),
        ("tests", str(suite.tests)),
        ("failures", str(suite.failures)),
        ("errors", str(suite.errors)),
        ("id", str(suite.id)),
        ("hostname", suite.hostname),
        ("skipped", str(suite.skipped) if suite.skipped else ""),
        ("time", suite.time),
        ("timestamp", suite.timestamp),
        optional=("hostname", "skipped", "time", "timestamp"),
    ))
    if suite.properties:
        props = ET.SubElement(el, "properties")
        for prop in suite.properties:
            ET.SubElement(props, "property", _attrs(
                ("name", prop.name), ("value", prop.value),
            ))
    for tc in suite.testcases:
        _testcase_element(el, tc)
    _add_output(el, "system-out", suite.system_out)


def to_element(suites: Testsuites) -> ET.Element:
    """Build the ElementTree for a JUnit document."""
    root = ET.Element("testsuites", _attrs(
        ("tests", str(suites.tests)),
        ("errors", str(suites.errors)),
        ("failures", str(suites.failures)),
        ("skipped", str(suites.skipped) if suites.skipped else ""),
        optional=("skipped",),
    ))
    for suite in suites.suites:
        _testsuite_element(root, suite)
    return root


def to_xml(suites: Testsuites, xml_header: bool = True) -> str:
    """Serialize a JUnit document to an indented XML string.

    Args:
        suites: The document to serialize.
        xml_header: Whether to start with an XML declaration.

    Returns:
        The XML text, ending with a newline.
    """
    root = to_element(suites)
    ET.indent(root, space="\t")
    text = ET.tostring(root, encoding="unicode") + "\n"
    if xml_header:
        text = XML_HEADER + text
    return text


def write_xml(suites: Testsuites, stream: TextIO, xml_header: bool = True) -> None:
    """Write a JUnit document to a text stream."""
    stream.write(to_xml(suites, xml_header=xml_header))
