"""
Academy Access Package

Capability checks for the academy app. The whole permission taxonomy is
reduced to one question: ``can_perform(actor, permission)``.

Struktur:
- permissions.py: Permission choices and PermissionChecker

Author: Academy Development Team
Version: 1.0.0
"""

from .permissions import Permission, PermissionChecker

__all__ = ["Permission", "PermissionChecker"]
