"""Identity and credential lifecycle management.

This package links external provider accounts to canonical users, stores and
rotates their provider tokens, resolves platform entities and issues
per-user stream keys.
"""

__version__ = "0.1.0"
