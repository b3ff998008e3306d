"""Backoff calculation for retry policies."""

from syncengine.models.config import RetryPolicy


def compute_backoff_delay(policy: RetryPolicy, attempt: int) -> float:
    """
    Delay to wait after a failed ``attempt`` (1-based) before the next one.

    Constant when ``backoff_multiplier`` is 1.0, exponential otherwise.

    Args:
        policy: Retry policy in effect
        attempt: Number of the attempt that just failed

    Returns:
        Delay in seconds; exponential delays are capped at
        ``policy.max_backoff_delay``

    Raises:
        ValueError: If attempt is lower than 1
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    if policy.backoff_multiplier == 1.0:
        return policy.backoff_delay

    delay = policy.backoff_delay * (policy.backoff_multiplier ** (attempt - 1))
    return min(delay, policy.max_backoff_delay)
