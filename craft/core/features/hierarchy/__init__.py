# (c) Copyright Datacraft, 2026
"""Workspace -> application -> environment tenancy hierarchy."""
