"""Chatspace: user-owned workspaces that carry instructions and files into new conversations."""

__version__ = "0.1.0"
