"""Command-line tools for the freight calculator."""
