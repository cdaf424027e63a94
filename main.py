"""
Study Buddy notifier - Main Entry Point
"""

from notifier.cli import cli

if __name__ == "__main__":
    cli()
