"""Entry point for ``python -m techblog``."""

from techblog.cli.main import app

if __name__ == "__main__":
    app()
