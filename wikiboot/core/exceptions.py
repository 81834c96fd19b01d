# wikiboot/core/exceptions.py

class WikiBootError(Exception):
    """Base class for exceptions in this application."""
    pass

class UsageError(WikiBootError):
    """Exception raised when the command line cannot be parsed."""
    pass

class ConfigurationError(WikiBootError):
    """Exception raised for errors in the configuration."""
    pass

class ComponentError(WikiBootError):
    """Exception raised for errors related to components."""
    pass

class PluginError(ComponentError):
    """Exception raised when a plugin contribution cannot be constructed."""
    pass

class WikiPageError(WikiBootError):
    """Exception raised when the root page cannot be materialized."""
    pass

class ServiceError(WikiBootError):
    """Exception raised when the wiki service fails to start or stop."""
    pass

class CommandExecutionError(WikiBootError):
    """Exception raised when a single command could not be executed at all."""
    pass
