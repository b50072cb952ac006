"""
Book Tracker - personal book inventory service.
"""

__version__ = "1.0.0"
