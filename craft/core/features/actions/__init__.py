# (c) Copyright Datacraft, 2026
"""Actions that subjects perform on resources."""
