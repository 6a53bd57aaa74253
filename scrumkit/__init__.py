"""Scrumkit – sprint retrospective service."""

__version__ = "0.1.0"
