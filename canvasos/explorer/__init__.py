"""
CanvasOS Explorer Module

The graphical file browser's view state.
"""

from .browser import FileBrowser

__all__ = [
    'FileBrowser',
]
