"""
portal_access.access

Derived access views over a session: view gates and navigation filtering.
"""

# Package marker.
