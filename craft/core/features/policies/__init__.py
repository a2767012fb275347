# (c) Copyright Datacraft, 2026
"""ABAC policies and the policy evaluation engine."""
