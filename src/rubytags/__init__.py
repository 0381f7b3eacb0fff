"""rubytags: Ruby tag-file generator built on tree-sitter."""

__version__ = "0.1.0"
