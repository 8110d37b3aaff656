"""
SQL Server Diagnostics - diagnostic query catalog runner

Executes a JSON catalog of diagnostic queries against one SQL Server database
and writes every result set into a single Excel workbook.
"""

import sys
from sqldiagnostics.interface.cli import main


if __name__ == "__main__":
    sys.exit(main())
