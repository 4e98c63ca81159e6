"""
Order parsing and stock engine.

Pure functions only: no I/O, no shared state. Services call these with the
current stock snapshot and get new values back.
"""
