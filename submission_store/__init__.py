"""
Multi-tenant submission persistence layer.

Resolves per-form collections, scopes every query to the active project and
form, and keeps form-driven secondary indexes in sync on a MongoDB store.
"""
