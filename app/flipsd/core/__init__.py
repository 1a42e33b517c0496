"""Core configuration, paths, errors and the build pipeline."""
