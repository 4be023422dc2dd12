"""go test output scanning: events and the line scanner."""

from gtreport.parsing.event import Event
from gtreport.parsing.gotest import iter_events, parse_gotest, parse_line

__all__ = [
    "Event",
    "iter_events",
    "parse_gotest",
    "parse_line",
]
