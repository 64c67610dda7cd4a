"""
Per-domain repository modules for store access.

Repository functions return `OperationResult` values so callers can tell a
missing record from a store failure. `submission_store.db.crud.RecordStore` is the thin
facade that folds those results into benign defaults.
"""
