"""
Storefront

Async client for a food-ordering REST backend: authenticated API access
with transparent token refresh, session restore, cart and checkout, admin
management, realtime notifications and an in-memory sandbox backend.
"""

__version__ = "1.0.0"
