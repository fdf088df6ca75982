"""
Entry point for running conjurconf as a module.

Usage:
    python -m conjurconf [command] [options]
"""

from conjurconf.cli import main

if __name__ == "__main__":
    main()
