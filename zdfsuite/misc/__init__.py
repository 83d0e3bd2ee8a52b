"""File-handling and type helpers."""
from .math import INTEGER_TYPES, FLOAT_TYPES, REAL_TYPES
from .files import generate_path, read_h5, write_h5
