"""
Data models for weekly suggestion generation.
"""
