#!/usr/bin/env python3
"""
Convenience entry point for running supervitre directly.

Usage: python supervitre.py [command] [options]
"""

from supervitre.cli.app import app

if __name__ == "__main__":
    app()
