"""API schemas (Pydantic response models)."""
