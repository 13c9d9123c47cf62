"""Undefsym core: data models, errors and the batch engine."""
