"""Keep credentials out of git.

credguard helps you:
- Scan files for API keys, tokens, passwords and connection strings
- Validate the credential manifests your project depends on
- Audit repository hygiene and score it from 0 to 100
- Install git hooks that block commits and pushes containing secrets
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
