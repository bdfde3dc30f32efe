"""
Identity Service - Face Recognition and Name Autocomplete

A modular Python service that matches face embeddings against registered
identities and offers prefix search over their names.
Integrates with a PostgREST backend and exposes a small HTTP API.
"""

__version__ = "1.0.0"
