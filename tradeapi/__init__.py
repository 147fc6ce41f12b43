"""
Trade API

REST API for Users and Trades with an in-process cache-aside layer in front of
paginated list queries and single-entity lookups.
"""

__version__ = "1.0.0"
