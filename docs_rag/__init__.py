"""
Retrieval-augmented question answering over Markdown documentation.
"""

__version__ = "1.0.0"
