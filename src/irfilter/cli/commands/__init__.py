"""Subcommands of the irfilter CLI."""
