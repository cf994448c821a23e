"""
freetime - find open meeting slots in the next few workdays.
"""

__version__ = "0.1.0"
