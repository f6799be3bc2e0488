"""Generate Unity CustomEditor scripts from the serialized fields of a C# script."""

__version__ = "0.1.0"
