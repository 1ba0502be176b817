"""
PartnerHub - accountability partner matching and task verification.
"""

__version__ = "1.0.0"
