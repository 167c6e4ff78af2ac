"""
KV-REST: Ordered In-Memory CRUD Store

An in-memory, key-ordered model store with a CRUD service layer,
snapshot persistence, and a line-based TCP front end built on asyncio.
"""

__version__ = "1.0.0"
