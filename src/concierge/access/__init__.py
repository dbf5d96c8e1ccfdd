"""Access bounded context.

Decides whether a freshly authenticated principal may use the concierge
application, which company (tenant) it belongs to and which role it holds,
and publishes the outcome as a read-only session state consumed by the
routing gates.
"""
