"""ID and value generators (CUID for history rows, application numbers)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def format_application_number(prefix: str, year: int, application_id: int) -> str:
    """Return the human-readable application number, e.g. PMC-2025-000042.

    Derived from the immutable numeric id, so a number is never reused.
    """
    return f"{prefix}-{year}-{application_id:06d}"
