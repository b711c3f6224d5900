"""Application layer: interfaces, services, use cases.

Depends only on domain and shared utilities (DIP).
Infrastructure implements the interfaces (repos, store, storage, cache).
"""
