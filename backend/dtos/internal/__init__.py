"""
Internal DTOs

Descriptors handed to the services by the schema editor (entities, fields,
relation settings) and the identity of the caller. Not exposed to external
APIs.
"""
