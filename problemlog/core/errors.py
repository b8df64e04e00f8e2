class PersistenceError(RuntimeError):
    """A database write failed and was rolled back."""
