"""
Allow running snmpctl as a module: python -m snmp_platform.cli
"""

import sys
from .snmpctl import main

if __name__ == "__main__":
    sys.exit(main())
