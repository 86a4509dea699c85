"""
Utility modules for Duo Stats.

Cross-cutting concerns:
- Storage: JSON record store and stats snapshot persistence
"""
