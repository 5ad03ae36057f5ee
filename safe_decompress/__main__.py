#!/usr/bin/env python3
"""
Main entry point for safe-decompress when run as a module.

This allows the package to be executed with: python -m safe_decompress
"""

from .cli import main

if __name__ == '__main__':
    main()
