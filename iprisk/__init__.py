"""IP address classification, heuristic risk scoring and geolocation lookup."""

from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "asn_organization",
    "classify",
    "continent_of",
    "currency_of",
    "extract_features",
    "gdpr_info",
    "get_version",
    "score",
]


def get_version() -> str:
    """Return the installed package version or a development marker."""
    try:
        return version("iprisk")
    except PackageNotFoundError:
        return "0.0.0-dev"


from .classification import classify  # noqa: E402
from .mappers import asn_organization, continent_of, currency_of, gdpr_info  # noqa: E402
from .risk import extract_features, score  # noqa: E402
