"""Undefsym loader: memory-mapped access to input files."""

from undefsym.loader.mapped_file import FileLoader, ObjectFile

__all__ = ["FileLoader", "ObjectFile"]
