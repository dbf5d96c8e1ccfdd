"""Shared kernel for the concierge application.

Contains value objects and abstractions shared across bounded contexts.
Keep this package free of business logic.
"""
