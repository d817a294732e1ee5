"""
Entry point for running toolchainfinder as a module.

Usage: python -m toolchainfinder [command] [options]
"""

from toolchainfinder.cli.parser import main

if __name__ == "__main__":
    main()
