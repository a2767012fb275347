# (c) Copyright Datacraft, 2026
"""Protected resources arranged in a tree."""
