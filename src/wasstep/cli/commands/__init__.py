"""CLI commands for wasstep.

This package contains the implementation of CLI commands:
    - run: Run a wsadmin build step
    - check: Validate settings and step configuration
    - version: Show version information
"""
