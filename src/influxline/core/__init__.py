"""Core domain: field values, encoder, metrics, registry and reporter."""
