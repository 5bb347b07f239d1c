"""Entry point for 'python -m stamplink' command."""

from stamplink.cli import main

if __name__ == "__main__":
    main()
