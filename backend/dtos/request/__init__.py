"""
Request DTOs

Arguments of the lifecycle manager and the property/member editor, validated
at the API boundary.
"""
