"""Run ID generation using coolnames for unique, memorable identifiers."""

from coolname import generate_slug


def generate_run_id(prefix: str = "") -> str:
    """Generate a unique, memorable identifier for one pipeline run.

    Every log line written during the run carries this ID, which makes a
    single submission easy to grep out of a shared log file.

    Args:
        prefix: Optional prefix to prepend to the generated ID (e.g., "taskrequest")

    Returns:
        A run ID in the format "prefix-word1-word2-word3" or "word1-word2-word3"

    Examples:
        >>> generate_run_id()
        'brave-golden-tiger'
        >>> generate_run_id("taskrequest")
        'taskrequest-swift-blue-falcon'
    """
    slug = generate_slug(3)

    if prefix:
        return f"{prefix}-{slug}"

    return slug
