"""
Blog API Backend

A FastAPI backend for a multi-locale health and lifestyle blog.
Provides localized articles, comments, likes, newsletter subscriptions
and user accounts on top of MongoDB.
"""

__version__ = "1.0.0"
