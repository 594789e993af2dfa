"""
CableLens - Network path diagnostics

Entry point for running as a module:
    python -m cablelens <domain>
"""

from .cli import main

if __name__ == '__main__':
    main()
