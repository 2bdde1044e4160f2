"""Small functional helpers shared across the workspace."""
