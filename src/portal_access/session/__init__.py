"""
portal_access.session

Session lifecycle package.

Responsibilities:
- The reactive `SessionStore` state machine.
- The `SessionProvider` that resolves and refreshes a store asynchronously.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The store is synchronous; only the provider touches asyncio.
