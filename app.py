"""
App assembly entry point.

Re-exports the FastAPI `app` from `submission_store.api.main`.
"""

from submission_store.api.main import app  # noqa: F401
