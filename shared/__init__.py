"""
Shared Module
==============

Configuration, logging and console utilities used by the ``undefsym``
command-line tool.
"""

from shared.config import ToolConfig

__all__ = ["ToolConfig"]
