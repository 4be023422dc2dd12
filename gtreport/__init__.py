"""gtreport: convert go test output into JUnit XML reports."""
