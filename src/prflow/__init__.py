"""prflow CLI entry point.

This package provides a Click-based CLI that turns the working tree's pending
changes into a Conventional Commit, pushes it, and opens or reuses the pull
request for the current branch. See `prflow --help` for details.
"""
