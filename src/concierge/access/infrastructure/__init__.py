"""Directory store adapters for the access bounded context."""
