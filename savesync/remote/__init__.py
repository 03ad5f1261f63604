"""
Remote store module.

Client for the authoritative saved-campaigns backend, with the legacy
endpoint fallback and response-shape adapter.
"""
