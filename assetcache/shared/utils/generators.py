"""Unique identifier generation for uploaded asset names."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Used as the file stem of every uploaded asset, so two uploads into the
    same namespace never share a key.

    Returns:
        A new CUID string (lowercase alphanumeric).
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_asset_filename(extension: str) -> str:
    """Return a fresh unique filename, e.g. 'k3x9…q1.jpg'.

    Args:
        extension: File extension including the dot ('.jpg'), or '' for none.
    """
    return f"{generate_cuid()}{extension}"
