"""
Module: auth
Description: Package initialization for credential handling.

This package contains helpers for the session API key:
- credentials: masking for display and request header construction

The API key is sent in full to the callback endpoint and nowhere else.
"""

__all__ = []
