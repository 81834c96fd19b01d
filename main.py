#!/usr/bin/env python3
"""
Minimal main.py - only hands the command line to the wiki launcher.

Argument parsing, configuration, logging, context building and the choice
between service and single-command mode all live in wikiboot.
"""

from wikiboot.main import main


if __name__ == "__main__":
    main()
