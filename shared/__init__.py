"""
Shared Kernel

Base classes and utilities shared by every domain app: date ranges and the
overlap rule, domain events, the event sink / message bus, the unit of work
and the error taxonomy rendered by the API layer.
"""
