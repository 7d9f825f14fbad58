"""
HTTP 适配层模块
"""

from .app import create_app, get_api_key, API_KEY_HEADER

__all__ = [
    "create_app",
    "get_api_key",
    "API_KEY_HEADER"
]
