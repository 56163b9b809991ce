"""
Cache Domain Module

Bounded cache implementation with its entities, value objects,
repository interfaces and domain services.
"""
