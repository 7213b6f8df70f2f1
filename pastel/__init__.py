"""
Pastel - a command line pastebin
"""

__version__ = "1.0.0"
