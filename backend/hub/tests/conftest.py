"""Shared fixtures for hub tests."""

import os

# Auth settings require AUTH_TOKEN_SECRET. Set a test default
# before any AuthSettings is instantiated.
os.environ.setdefault("AUTH_TOKEN_SECRET", "test-secret")
