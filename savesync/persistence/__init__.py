"""
Local persistence module.

SQLite-backed key/value storage and the saved-campaigns cache built on it.
"""
