"""
Book Tracker Test Suite

Tests are organized into:
- unit/: Security helpers and repositories
- integration/: HTTP API driven in-process
"""
