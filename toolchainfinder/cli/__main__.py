"""
Entry point for running the toolchainfinder CLI as a module.

Usage: python -m toolchainfinder.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
