"""
Data Transfer Objects (DTOs) Layer

Inputs of the DTO services, kept apart from the stored record shapes in
schemas.py.

Structure:
- request/: Arguments of lifecycle and editor operations
- internal/: Schema-change descriptors and the requester
"""
