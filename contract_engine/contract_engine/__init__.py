"""Schema contract verification engine.

Compares the columns declared by an application's pydantic schema registry
against the real structure of a relational store and reports drift per
table.
"""

__version__ = "0.1.0"
