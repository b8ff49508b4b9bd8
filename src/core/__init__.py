"""
Core domain models, fixed point math, errors and reply contracts.

This module contains the foundational building blocks of the vault that are
independent of collaborators (bank, share token, exchange venue, price feed).
"""
