"""
Infrastructure layer - storage collaborators.

Each subdirectory wraps a storage backend:
- memory: In-process repositories for sessions, goals and player levels

These wrappers translate between storage and our domain models.
"""
