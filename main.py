"""Entry point for the Thought Sort terminal dashboard."""

from cli.client import main

if __name__ == "__main__":
    main()
