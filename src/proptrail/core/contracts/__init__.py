"""Typed contracts (pydantic v2) shared by the store, engines and API."""
