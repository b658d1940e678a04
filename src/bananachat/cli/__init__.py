"""Command-line interface for bananachat."""
