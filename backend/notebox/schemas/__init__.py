"""Pydantic request/response models: the HTTP contract of the service."""
