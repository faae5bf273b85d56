"""
Contains some useful utility functions to be used in check functions.
"""
from .query_object import optional_field, required_field
