"""Entry point for running elspeak as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the elspeak CLI application."""
    app()


if __name__ == "__main__":
    main()
