"""
LinkedIn Export Parser

Turns LinkedIn data-export archives into normalized, deduplicated records.
"""

__version__ = "0.1.0"
