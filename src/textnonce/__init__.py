"""Package initialization and public surface.

This module exposes :data:`APP_VERSION`, which is resolved from installed
package metadata when available (project name: ``textnonce``). When the
metadata cannot be found, such as when running directly from a source
checkout, a development placeholder (``"0.0.0-dev"``) is used instead.
"""

from importlib import metadata

from textnonce.exceptions import (
    EntropyUnavailableError,
    MalformedNonceError,
    NonceConfigError,
    NotAlignedError,
    TooShortError,
)
from textnonce.generator import (
    NonceGenerator,
    generate,
    generate_configured,
    generate_default,
    generate_url_safe,
    get_default_generator,
)
from textnonce.models import Base64Alphabet, NonceValue, TimePrefix


def _determine_version() -> str:
    """Return the package version string without raising during import."""

    try:
        return metadata.version("textnonce")
    except metadata.PackageNotFoundError:
        return "0.0.0-dev"


APP_VERSION: str = _determine_version()
__version__: str = APP_VERSION

__all__ = [
    "APP_VERSION",
    "__version__",
    # models
    "Base64Alphabet",
    "NonceValue",
    "TimePrefix",
    # generation
    "NonceGenerator",
    "generate",
    "generate_configured",
    "generate_default",
    "generate_url_safe",
    "get_default_generator",
    # errors
    "EntropyUnavailableError",
    "MalformedNonceError",
    "NonceConfigError",
    "NotAlignedError",
    "TooShortError",
]
