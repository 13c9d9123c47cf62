"""Undefsym parsers: bounds-checked byte view and the ELF symbol scanner."""
