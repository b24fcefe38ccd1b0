"""
Helping Hand weekly suggestion engine.
"""
__version__ = "0.1.0"
