# (c) Copyright Datacraft, 2026
"""Users, their roles and workspace assignments."""
