"""
NetCheck - Network Health Diagnostic Tool

Entry point for running as a module:
    python -m netcheck <target>
"""

from .cli import main

if __name__ == '__main__':
    main()
