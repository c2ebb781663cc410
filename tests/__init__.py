"""
Unit tests for the shared services (Turnstile, email providers, relay,
form controller, site configuration).

App endpoint tests live in their app directories (e.g., contact/tests.py).
"""
