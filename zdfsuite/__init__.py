"""
Configuration and capture of high-dynamic-range 3D frames from structured-light cameras.
"""
__version__ = "0.0.1"
