"""
Saved-campaigns synchronization module.

Error classification, circuit breaking, optimistic toggling and
reconciliation against the authoritative backend list.
"""
