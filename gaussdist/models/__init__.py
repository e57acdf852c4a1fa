"""
gaussdist Models

Distribution models live in the ``distributions`` subpackage.
"""

from . import distributions

__all__ = ['distributions']
