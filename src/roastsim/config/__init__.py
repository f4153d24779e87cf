"""
Package: config
Description: Application configuration loaded from the environment.
"""

__all__ = []
