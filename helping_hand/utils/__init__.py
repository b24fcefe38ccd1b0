"""
Shared utilities: DynamoDB access, logging and template parsing.
"""
