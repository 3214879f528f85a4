"""
mongopeek - query compiler and document viewer for document databases
"""

__version__ = "0.3.0"
