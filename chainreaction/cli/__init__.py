"""Command-line entry points for Chain Reaction."""
