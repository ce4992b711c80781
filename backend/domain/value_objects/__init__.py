"""
Domain Value Objects

Value objects are immutable types that represent descriptive aspects of the domain.
They have no conceptual identity and are compared by their values, not by ID.

Examples:
- DtoType: Kind of a module DTO (custom, custom enum or one of the default kinds)
- PropertyType: Type of a DTO property
- SettingsField: Settings key a DTO query may filter on
"""
