"""
portal_access.errors

Exceptions shared by the access layer.
"""

from __future__ import annotations


class AccessConfigurationError(ValueError):
    """
    Raised at construction time for malformed access configuration
    (unknown role tags, gates without a requirement, bad navigation entries).
    """


# --- Module Notes -----------------------------------------------------------
# Evaluation-time code never raises this; a config that constructs is always decidable.
