"""Workspace management commands."""
