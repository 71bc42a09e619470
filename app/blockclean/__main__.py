"""Allow running blockclean as ``python -m blockclean``."""

from blockclean.cli.main import app

if __name__ == "__main__":
    app()
