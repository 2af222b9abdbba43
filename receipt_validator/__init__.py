"""
Receipt Validator - App Store receipt validation for lifetime entitlement restore.
"""

__version__ = "0.1.0"
