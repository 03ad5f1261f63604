"""
Utility functions module.

Time Semantics:
- All timestamps are timezone-aware UTC datetimes
- Cache-busting query values use wall-clock epoch milliseconds
"""
