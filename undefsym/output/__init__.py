"""Undefsym output: console rendering and JSON reports."""
