"""
User Service
============

A small HTTP service that creates user records:
- PostgreSQL as the only store, accessed through an asyncpg pool
- FastAPI for the HTTP surface
- Every user insert is preceded by an audit log insert in the same transaction
"""

__version__ = "1.0.0"
__author__ = "User Service Team"
