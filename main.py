#!/usr/bin/env python3
"""
Main entry point for the IRC relay
"""

import sys

from ircrelay.cli import main

if __name__ == "__main__":
    sys.exit(main())
