"""
GateWatch - security operations for the API gateway admin plane
"""

__version__ = "1.0.0"
