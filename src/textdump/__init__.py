"""
Textdump - A tool for serializing a directory of text files for LLM ingestion.

This package walks a directory tree, filters entries against wildcard ignore
patterns (from the command line and the root .gitignore), skips binary files,
and writes the remaining files as tagged blocks on standard output.
"""

__version__ = "0.1.0"
__author__ = "Textdump Team"
