"""
Repositories over caller-owned in-memory collections.

Each repository locates entities by id and returns rewritten copies of its
collection; nothing here mutates the lists it was given.
"""
