"""Reading and writing draws tables."""

from .readers import read_csv, read_draws
from .writers import write_csv

__all__ = ["read_csv", "read_draws", "write_csv"]
