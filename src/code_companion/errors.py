class ConfigurationError(ValueError):
    """Raised when review settings or collaborator results break the expected contract."""
