"""
Authentication module.

Token persistence lives here; the session state machine is in
``storefront.auth.session``.
"""

from storefront.auth.token_store import TokenStore, BaseStorage, FileStorage, MemoryStorage

__all__ = ["TokenStore", "BaseStorage", "FileStorage", "MemoryStorage"]
