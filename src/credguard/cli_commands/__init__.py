"""CLI command implementations for credguard."""
