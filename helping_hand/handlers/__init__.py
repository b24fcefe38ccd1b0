"""
Lambda handlers package for AWS Lambda functions.
"""
from .generate_suggestions import handler as generate_suggestions_handler

__all__ = ["generate_suggestions_handler"]
