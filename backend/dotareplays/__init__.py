"""Dota Replays API — versioned replay catalog with token auth and permissions.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
