"""
Error taxonomy for the memory store and its embedding engine.
"""


class MemoryStoreError(Exception):
    """Base class for memory store errors."""
    pass


class EmptyCorpusError(MemoryStoreError):
    """Raised when the corpus model is (re)trained with zero documents."""

    def __init__(self, message: str = "Cannot initialize with empty corpus"):
        super().__init__(message)


class DecompositionFailure(MemoryStoreError):
    """SVD did not produce a usable basis. Recovered inside the projector."""
    pass


class IndexUnavailable(MemoryStoreError):
    """The vector index backend could not be reached or failed."""
    pass


class StorageNotInitialized(IndexUnavailable):
    """The vector index was used before initialize() was called."""

    def __init__(self, message: str = "Storage not initialized. Call initialize() first."):
        super().__init__(message)


class DimensionMismatch(MemoryStoreError, ValueError):
    """A vector's length differs from the configured embedding dimension."""

    def __init__(self, actual: int, expected: int):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Vector dimension {actual} does not match expected dimension {expected}")


class MemoryNotFound(MemoryStoreError, KeyError):
    """No memory exists with the requested id."""

    def __init__(self, memory_id: str):
        self.memory_id = memory_id
        super().__init__(f"Memory not found: {memory_id}")
