"""Entry point for ``python -m tenderdesk``."""

from tenderdesk.cli import app

if __name__ == "__main__":
    app()
