class RelayError(Exception):
    pass


class ConfigurationError(RelayError):
    """Startup or wiring problem; never recovered from."""


class PublishError(RelayError):
    """The broker client refused or did not confirm a publish."""
