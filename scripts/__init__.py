"""Developer scripts for running the test suites."""
