"""
Academy Notifications Package

Real-time events for connected clients. Events are pushed into a per-user
inbox in the Django cache (Redis in production) and drained by the client.

Struktur:
- notifier.py: Notifier interface, CacheNotifier, RedisNotifier, get_notifier
- views.py: Inbox endpoint

Author: Academy Development Team
Version: 1.0.0
"""

from .notifier import CacheNotifier, Notifier, RedisNotifier, get_notifier

__all__ = ["Notifier", "CacheNotifier", "RedisNotifier", "get_notifier"]
