"""Report configuration file.

The optional .gtreport_config JSON file holds defaults for the command
line: the fallback package name, which output keys become suite
properties, and how the JUnit document is written.  Flags given on the
command line take precedence over it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gtreport.junit.renderer import DEFAULT_PROPERTY_KEYS

DEFAULT_CONFIG_FILE = Path(".gtreport_config")


@dataclass
class ReportConfig:
    """Settings read from the .gtreport_config file."""

    package_name: str = ""
    property_keys: list[str] = field(
        default_factory=lambda: list(DEFAULT_PROPERTY_KEYS)
    )
    set_exit_code: bool = False
    xml_header: bool = True
    hostname: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportConfig:
        """Build a config from parsed JSON, ignoring malformed values."""
        cfg = cls()
        if data.get("package_name"):
            cfg.package_name = str(data["package_name"])
        keys = data.get("property_keys")
        if isinstance(keys, list):
            cfg.property_keys = [str(k) for k in keys]
        cfg.set_exit_code = bool(data.get("set_exit_code", False))
        cfg.xml_header = bool(data.get("xml_header", True))
        if data.get("hostname"):
            cfg.hostname = str(data["hostname"])
        return cfg


def load_config(path: Path | None = None) -> ReportConfig:
    """Load the report configuration.

    Args:
        path: Config file to read.  Defaults to .gtreport_config in the
            current directory.

    Returns:
        The loaded config.  A missing, unreadable or corrupt file gives
        the default config.
    """
    if path is None:
        path = DEFAULT_CONFIG_FILE
    if not path.exists():
        return ReportConfig()
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return ReportConfig()
    if not isinstance(data, dict):
        return ReportConfig()
    return ReportConfig.from_dict(data)
