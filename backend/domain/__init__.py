"""
Domain Layer

Value types the DTO services branch on, kept free of persistence concerns.

Structure:
- value_objects/: DTO kinds, property types and queryable settings fields
"""
