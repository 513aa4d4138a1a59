"""Command line interface for prompter."""
