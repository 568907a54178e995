"""
CineAI: movie and series identification with pluggable AI providers.
"""

__version__ = "1.0.0"
