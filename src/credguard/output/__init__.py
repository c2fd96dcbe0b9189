"""Terminal output for credguard."""
