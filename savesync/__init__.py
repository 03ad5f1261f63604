"""
SaveSync - Saved Campaigns State Synchronization Engine

Client-side engine that keeps a creator's saved-campaigns set consistent
between an optimistic local cache and the authoritative BrandConnect
backend, with error classification, a circuit breaker and a local-only
degraded mode.
"""

__version__ = "0.1.0"
__author__ = "BrandConnect Team"
