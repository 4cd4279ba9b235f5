"""Size-diff engine: workspaces, builds, file stats, reports."""
