"""Core building blocks: locale handling, overlays, path resolution, errors and logging."""
