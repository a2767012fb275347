# (c) Copyright Datacraft, 2026
"""Catalog of the attributes that subjects, resources and additional resources carry."""
