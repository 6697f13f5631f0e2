"""
Tests for the suite's framework code.

This package contains:
- unit/: configuration, tags, session lifecycle, reporting and runner
  tests that need no browser
- ui/: page-object tests against local HTML in a real Playwright browser
"""
