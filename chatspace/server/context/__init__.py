"""Workspace context: injection into chat requests and token accounting."""
