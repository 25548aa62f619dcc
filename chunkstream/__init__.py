"""
Chunkstream: concurrent document ingestion.

Streams paragraphs from plain-text files and heading-scoped sections from
markdown files, read from a local directory or an S3 bucket by a pool of
worker threads.
"""

__version__ = "0.1.0"
