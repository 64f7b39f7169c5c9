"""Pydantic request and response models for the PixTag API."""
