"""
Core helpers - exceptions and predicate translation.
"""
