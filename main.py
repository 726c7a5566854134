#!/usr/bin/env python3
"""
Command-line interface for the unsubscribe scanner.

Usage:
    python main.py scan --email user@gmail.com
    python main.py hosts
"""

from unsub_scanner.cli.main import main


if __name__ == '__main__':
    main()
