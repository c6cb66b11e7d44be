"""
nodeconf package
----------------
Process-wide configuration store for a database node.
Reads layered INI files, answers (section, key) lookups, persists runtime
changes back to the last INI file and notifies registered observers.
"""

__version__ = "0.1.0"
