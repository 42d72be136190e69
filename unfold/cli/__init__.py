"""Command-line interface for unfold."""
