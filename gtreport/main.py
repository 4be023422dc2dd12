"""Entry point for gtreport.

Reads go test output from a file or stdin, builds the test report and
writes it as a JUnit XML document.  Optionally dumps the intermediate
report as YAML and sets a failing exit code when any test failed.
"""

from __future__ import annotations

import argparse
import datetime
import socket
import sys
from pathlib import Path

from gtreport.config import load_config
from gtreport.junit.renderer import to_junit
from gtreport.junit.schema import write_xml
from gtreport.parsing.gotest import parse_gotest
from gtreport.report.builder import from_events
from gtreport.report.yaml_writer import write_yaml


def _timestamp(value: str) -> datetime.datetime:
    """Parse an RFC 3339 timestamp given on the command line."""
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid RFC 3339 timestamp: {value}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Convert go test output to a JUnit XML report"
    )
    parser.add_argument(
        "--in",
        dest="input",
        type=Path,
        default=None,
        help="Read go test output from this file (default: stdin)",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write the JUnit XML report to this file (default: stdout)",
    )
    parser.add_argument(
        "--package-name",
        type=str,
        default=None,
        help="Package name used when the output does not name the package",
    )
    parser.add_argument(
        "--go-version",
        type=str,
        default=None,
        help="Record this Go version as the go.version property of every suite",
    )
    parser.add_argument(
        "--hostname",
        type=str,
        default=None,
        help="Hostname recorded on every suite (default: local hostname)",
    )
    parser.add_argument(
        "--timestamp",
        type=_timestamp,
        default=None,
        help="RFC 3339 timestamp recorded on every suite (default: now)",
    )
    parser.add_argument(
        "--set-exit-code",
        action="store_true",
        default=False,
        help="Exit with status 1 if any test or package failed",
    )
    parser.add_argument(
        "--no-xml-header",
        action="store_true",
        default=False,
        help="Do not write the XML declaration",
    )
    parser.add_argument(
        "--iocopy",
        action="store_true",
        default=False,
        help="Copy the input to stdout while reading it (requires --out)",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the JSON config file (default: ./.gtreport_config)",
    )
    parser.add_argument(
        "--report-yaml",
        type=Path,
        default=None,
        help="Also write the intermediate test report as YAML to this file",
    )
    args = parser.parse_args(argv)
    if args.iocopy and args.out is None:
        parser.error("--iocopy requires --out")
    return args


def _read_lines(path: Path | None, iocopy: bool) -> list[str]:
    """Read the input lines, echoing them to stdout if requested.

    Raises:
        OSError: If the input file cannot be read.
    """
    if path is None:
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is not None:
            # Undecodable bytes are replaced, never fatal
            raw = [line.decode("utf-8", errors="replace") for line in buffer]
        else:
            raw = sys.stdin.readlines()
    else:
        with open(path, encoding="utf-8", errors="replace") as f:
            raw = f.readlines()
    if iocopy:
        sys.stdout.writelines(raw)
        sys.stdout.flush()
    return [line.rstrip("\r\n") for line in raw]


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = load_config(args.config_file)

    try:
        lines = _read_lines(args.input, args.iocopy)
    except OSError as e:
        print(f"Error: could not read input: {e}", file=sys.stderr)
        return 1

    package_name = (
        args.package_name if args.package_name is not None
        else config.package_name
    )
    report = from_events(parse_gotest(lines), package_name)
    for warning in report.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    properties: list[tuple[str, str]] = []
    if args.go_version:
        properties.append(("go.version", args.go_version))

    hostname = args.hostname or config.hostname or socket.gethostname()
    now = args.timestamp or datetime.datetime.now(tz=datetime.timezone.utc)
    suites = to_junit(
        report,
        hostname,
        now,
        properties=properties,
        property_keys=config.property_keys,
    )
    xml_header = config.xml_header and not args.no_xml_header

    try:
        if args.out is not None:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            with open(args.out, "w", encoding="utf-8") as f:
                write_xml(suites, f, xml_header=xml_header)
        else:
            write_xml(suites, sys.stdout, xml_header=xml_header)

        if args.report_yaml is not None:
            write_yaml(report, args.report_yaml)
    except OSError as e:
        print(f"Error: could not write report: {e}", file=sys.stderr)
        return 1

    if (args.set_exit_code or config.set_exit_code) and not report.is_successful():
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
