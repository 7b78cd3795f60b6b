class ProviderError(Exception):
    """Base exception for wallet-data provider failures."""
    pass


class ProviderUnavailable(ProviderError):
    """Raised on network errors, timeouts, non-2xx responses or malformed provider payloads."""
    pass


class PriceUnavailable(ProviderError):
    """Raised when a token or currency has no resolvable USD price."""
    pass
