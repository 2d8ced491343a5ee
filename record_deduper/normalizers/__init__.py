"""
Key normalization utilities.

These modules turn extracted key fields into the canonical form used for
duplicate comparison.
"""

from .keys import FullKey, assemble_key, normalized_key, transform_key

__all__ = [
    'FullKey',
    'assemble_key',
    'normalized_key',
    'transform_key',
]
