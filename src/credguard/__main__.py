"""Allow running credguard as ``python -m credguard``."""

from credguard.cli import app

if __name__ == "__main__":
    app()
