"""Shared domain code for the compatibility service: schema, models, merge, storage."""
