"""Command-line interface for nexus-deploy."""
