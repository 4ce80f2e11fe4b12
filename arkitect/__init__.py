"""Describe rules for a project's files in YAML and verify that they hold."""

__version__ = "0.1.0"