"""
dircat - concatenate the files of a directory tree into one stream.

This package walks a directory tree, keeps the files whose extension is
allowed and whose path matches no exclusion glob, and writes their contents
one after another to standard output (or a file) with a progress counter.
"""

__version__ = "0.1.0"
__author__ = "dircat contributors"
