"""
Test doubles shared across the suite.
"""
