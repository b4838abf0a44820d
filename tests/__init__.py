"""
suiterun test suite.

- Unit tests for the registry, capture, assertion, reporter and runner modules
- Integration tests for the command line and module-level entry points
"""
