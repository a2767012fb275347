# (c) Copyright Datacraft, 2026
"""Subjects: the users, groups, roles, services and devices that request access."""
