"""Tests for JUnit document types and XML serialization."""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET

from gtreport.junit.schema import (
    XML_HEADER,
    Output,
    Result,
    Testcase,
    Testsuite,
    Testsuites,
    format_benchmark_time,
    format_duration,
    to_element,
    to_xml,
    write_xml,
)


def _suite_with_cases() -> Testsuite:
    suite = Testsuite(name="pkg", hostname="host", time="1.000", timestamp="2024-01-02T03:04:05Z")
    suite.add_testcase(Testcase(name="TestPass", classname="pkg", time="0.100"))
    suite.add_testcase(Testcase(
        name="TestFail", classname="pkg", time="0.200",
        failure=Result(message="Failed", data="boom"),
    ))
    suite.add_testcase(Testcase(
        name="TestSkip", classname="pkg", time="0.000",
        skipped=Result(message="not today"),
    ))
    suite.add_testcase(Testcase(
        name="TestCrash", classname="pkg", time="0.000",
        error=Result(message="No test result found"),
    ))
    return suite


class TestFormatting:
    """Tests for time formatting."""

    def test_format_duration(self):
        assert format_duration(1.23456) == "1.235"
        assert format_duration(0) == "0.000"

    def test_format_benchmark_time(self):
        """Benchmark times keep nanosecond precision."""
        assert format_benchmark_time(123e-9) == "0.000000123"


class TestCounters:
    """Tests for suite and document counters."""

    def test_add_testcase_counts(self):
        """Each result kind increments its own counter."""
        suite = _suite_with_cases()
        assert suite.tests == 4
        assert suite.failures == 1
        assert suite.skipped == 1
        assert suite.errors == 1

    def test_add_suite_aggregates(self):
        """The document adds up suite counters and numbers suites."""
        suites = Testsuites()
        suites.add_suite(_suite_with_cases())
        suites.add_suite(_suite_with_cases())
        assert suites.tests == 8
        assert suites.failures == 2
        assert suites.errors == 2
        assert suites.skipped == 2
        assert [s.id for s in suites.suites] == [0, 1]

    def test_add_property(self):
        suite = Testsuite(name="pkg")
        suite.add_property("goos", "linux")
        assert suite.properties[0].name == "goos"
        assert suite.properties[0].value == "linux"


class TestXml:
    """Tests for the XML tree and text."""

    def test_element_structure(self):
        """Suites, testcases and result elements are nested correctly."""
        suites = Testsuites()
        suite = _suite_with_cases()
        suite.add_property("goarch", "amd64")
        suite.system_out = Output(data="goarch: amd64")
        suites.add_suite(suite)

        root = to_element(suites)
        assert root.tag == "testsuites"
        assert root.get("tests") == "4"
        ts = root.find("testsuite")
        assert ts is not None
        assert ts.get("name") == "pkg"
        assert ts.get("hostname") == "host"
        assert ts.get("timestamp") == "2024-01-02T03:04:05Z"
        assert ts.get("id") == "0"
        prop = ts.find("properties/property")
        assert prop is not None
        assert prop.get("name") == "goarch"
        assert prop.get("value") == "amd64"
        assert ts.findtext("system-out") == "goarch: amd64"

        cases = ts.findall("testcase")
        assert [c.get("name") for c in cases] == [
            "TestPass", "TestFail", "TestSkip", "TestCrash",
        ]
        assert len(list(cases[0])) == 0
        failure = cases[1].find("failure")
        assert failure is not None
        assert failure.get("message") == "Failed"
        assert failure.text == "boom"
        assert cases[2].find("skipped").get("message") == "not today"
        assert cases[3].find("error").get("message") == "No test result found"

    def test_optional_attributes_omitted(self):
        """Empty optional attributes are left out."""
        suites = Testsuites()
        suites.add_suite(Testsuite(name="pkg"))
        ts = to_element(suites).find("testsuite")
        assert "hostname" not in ts.attrib
        assert "skipped" not in ts.attrib
        assert ts.find("properties") is None
        assert ts.find("system-out") is None

    def test_attribute_sets(self):
        """Root and testcase elements carry only the modelled attributes."""
        suites = Testsuites()
        suites.add_suite(_suite_with_cases())
        root = to_element(suites)
        assert set(root.attrib) == {"tests", "errors", "failures", "skipped"}
        tc = root.find("testsuite/testcase")
        assert tc.attrib == {"name": "TestPass", "classname": "pkg", "time": "0.100"}
        assert root.find("testsuite/system-err") is None

    def test_xml_header(self):
        """The XML declaration is optional."""
        suites = Testsuites()
        assert to_xml(suites).startswith(XML_HEADER)
        assert to_xml(suites, xml_header=False).startswith("<testsuites")

    def test_invalid_characters_replaced(self):
        """Control characters that XML forbids are replaced."""
        suites = Testsuites()
        suite = Testsuite(name="pkg")
        suite.system_out = Output(data="color \x1b[31mred\x1b[0m")
        suites.add_suite(suite)
        text = to_xml(suites)
        parsed = ET.fromstring(text[len(XML_HEADER):])
        assert "\x1b" not in parsed.find("testsuite").findtext("system-out")

    def test_write_xml_roundtrip(self):
        """Written XML parses back to the same structure."""
        suites = Testsuites()
        suites.add_suite(_suite_with_cases())
        buf = io.StringIO()
        write_xml(suites, buf, xml_header=False)
        root = ET.fromstring(buf.getvalue())
        assert len(root.findall("testsuite/testcase")) == 4
