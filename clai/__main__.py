# clai/__main__.py
"""
Entry point for running clai as a module.
"""
from clai.cli import main

if __name__ == "__main__":
    main()
