class InvalidArgument(ValueError):
    """Calculator input outside the supported enum values."""
