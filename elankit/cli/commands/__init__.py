"""Command implementations for the elankit CLI."""
