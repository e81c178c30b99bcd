class BfsFindError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(BfsFindError):
    # errors related to configuration (flags, config files, profiles).
    pass

class DiscoveryError(BfsFindError):
    # errors setting up a search (not per-entry walk failures, those are data).
    pass

class OutputError(BfsFindError):
    # errors during output operations.
    pass
