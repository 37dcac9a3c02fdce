# -*- coding: utf-8 -*-
"""
Realtime sync module
"""

from .feed import SyncFeed, sync_feed, websocket_endpoint

__all__ = [
    'SyncFeed',
    'sync_feed',
    'websocket_endpoint',
]
