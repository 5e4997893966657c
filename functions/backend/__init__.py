"""
Backend package for the users/todos API.

This package provides a FastAPI application over Firestore, plus the
platform-client abstractions (document store, identity provider, push
messaging) shared with the Firebase callable functions in `main.py`.
"""
