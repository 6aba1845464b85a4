class InferenceError(Exception):
    """Raised when a call to the inference provider fails."""


class InferenceValidationError(InferenceError):
    """Raised when the model's reply does not match the expected shape."""


class InferenceNetworkError(InferenceError):
    """Raised when the provider call fails due to network/infrastructure issues."""


class InferenceRetryableError(InferenceNetworkError):
    """Transient provider failure: 5xx, rate limit, quota, timeout."""
