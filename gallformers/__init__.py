"""
Gallformers glossary linker
"""

__version__ = "1.0.0"
