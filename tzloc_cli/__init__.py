"""
tzloc CLI - Command-line interface for packing datasets and running queries.

Usage:
    tzloc pack combined.json timezones.tzlc
    tzloc query --dataset timezones.tzlc --lat 52.52 --lon 13.40
    tzloc info --dataset timezones.tzlc
"""

from .cli import main

__all__ = ['main']
