"""Monarch ERP import file generator.

Converts customer lists, sales orders and WIP job sheets into the fixed-width
positional text files consumed by the Monarch import facility.
"""

__version__ = "0.3.0"
