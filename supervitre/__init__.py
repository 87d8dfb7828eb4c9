"""
supervitre - appointment scheduling core for a window cleaning service.
"""

__version__ = "0.1.0"
