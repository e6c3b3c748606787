"""wasstep CLI module.

This module provides the command-line interface for wasstep, enabling users to:
    - Run a wsadmin build step with `wasstep run`
    - Validate the configuration with `wasstep check`
"""
