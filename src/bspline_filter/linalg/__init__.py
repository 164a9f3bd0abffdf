"""Linear algebra module: banded storage and LU factor/solve."""

from .banded import BandedMatrix, BandedLU

__all__ = [
    "BandedMatrix",
    "BandedLU",
]
