"""Main application entry point."""

from .cli import app

def main():
    """Main entry point that runs the CLI app."""
    app()

if __name__ == "__main__":
    main()
