"""
Watchly backend: social watch logging and mood-based recommendations.
"""

__version__ = "1.0.0"
