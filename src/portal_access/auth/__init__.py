"""
portal_access.auth

Identity and role package.

Responsibilities:
- Role vocabulary, RoleSet and session models.
- Pure role classification (capabilities).
- JWT helpers and claim mapping.
"""

# Package marker.
