"""Git hook and pre-commit framework integrations."""
