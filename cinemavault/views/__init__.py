"""
Immutable view state and pure query functions consumed by the front end.

State values are frozen; every transition returns a new value.
"""
