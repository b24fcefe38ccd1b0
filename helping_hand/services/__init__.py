"""
Business logic for weekly suggestion generation.
"""
