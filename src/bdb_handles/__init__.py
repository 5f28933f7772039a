"""
bdb-handles - Handle layer for an embedded key/value storage engine

Safe Database, Environment and Cursor handles over a Berkeley DB style
engine: single-open and post-close guarantees, structured engine errors,
and a cursor protocol with end-of-sequence detection.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
