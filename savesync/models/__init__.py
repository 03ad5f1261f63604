"""
Data models and contracts module.

Immutable data structures for sync directions, classified remote outcomes,
pending operations, circuit breaker state and toggle results.
"""
