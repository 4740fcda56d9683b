"""FastAPI service for workspaces, workspace files and context injection."""
