# (c) Copyright Datacraft, 2026
"""Conditions, states, approvals, statuses and tickets that policies can require."""
