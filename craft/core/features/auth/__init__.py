# (c) Copyright Datacraft, 2026
"""Token authentication and role checks."""
