class RepositoryError(Exception):
    """Base exception for all repository errors."""
    pass


class DatabaseConnectionError(RepositoryError):
    """Raised when the repository cannot connect to the database."""
    pass


class StoreReadFailed(RepositoryError):
    """Raised when a query (listing wallets, existence checks, reads) fails."""
    pass


class StoreWriteFailed(RepositoryError):
    """Raised when an insert or delete fails."""
    pass


class DuplicateEntityError(StoreWriteFailed):
    """Raised when an attempt is made to create an entity that violates a unique constraint."""
    pass
