"""MaxMind GeoLite2 offline database client for geo/ASN lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import geoip2.database
import geoip2.errors

logger = logging.getLogger(__name__)

CITY_DB_FILENAME = "GeoLite2-City.mmdb"
ASN_DB_FILENAME = "GeoLite2-ASN.mmdb"


@dataclass
class MaxMindResult:
    """Result from MaxMind GeoLite2 database lookup.

    Attributes:
        ip_address: The IP address that was looked up
        country_code: ISO 3166-1 alpha-2 country code (e.g., "US")
        country_name: Full country name (e.g., "United States")
        region: First subdivision name
        region_code: First subdivision ISO code
        city: City name if available
        postal_code: Postal code if available
        latitude: Latitude coordinate
        longitude: Longitude coordinate
        time_zone: IANA time zone
        asn: Autonomous System Number
        asn_org: AS organization name
        accuracy_radius: Accuracy radius in kilometers
    """

    ip_address: str
    country_code: str | None = None
    country_name: str | None = None
    region: str | None = None
    region_code: str | None = None
    city: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    time_zone: str | None = None
    asn: int | None = None
    asn_org: str | None = None
    accuracy_radius: int | None = None


class MaxMindClient:
    """Offline GeoLite2 database client.

    Database files (either may be missing; lookups then return partial data):
        - GeoLite2-City.mmdb: City, country, coordinates
        - GeoLite2-ASN.mmdb: ASN numbers and organizations

    Usage:
        with MaxMindClient(Path("/var/lib/GeoIP")) as client:
            result = client.lookup_ip("8.8.8.8")
            if result:
                print(f"ASN: {result.asn} ({result.asn_org})")
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize MaxMind client with the directory holding the .mmdb files.

        Raises:
            ValueError: If db_path exists but is not a directory
        """
        db_path = Path(db_path)
        if db_path.exists() and not db_path.is_dir():
            raise ValueError(f"Database path must be a directory: {db_path}")

        self.db_path = db_path
        self.city_db_path = db_path / CITY_DB_FILENAME
        self.asn_db_path = db_path / ASN_DB_FILENAME

        # Readers are opened on first use
        self._city_reader: Optional[geoip2.database.Reader] = None
        self._asn_reader: Optional[geoip2.database.Reader] = None

        self.stats: Dict[str, int] = {
            "lookups": 0,
            "city_hits": 0,
            "asn_hits": 0,
            "errors": 0,
            "not_found": 0,
        }

        logger.info(f"MaxMind client initialized with database path: {db_path}")

    @property
    def available(self) -> bool:
        """True when at least one database file is present."""
        return self.city_db_path.exists() or self.asn_db_path.exists()

    def _open_reader(self, path: Path) -> Optional[geoip2.database.Reader]:
        if not path.exists():
            logger.debug(f"MaxMind database not found: {path}")
            return None
        try:
            reader = geoip2.database.Reader(str(path))
        except (OSError, ValueError, RuntimeError) as e:
            logger.error(f"Failed to open MaxMind database {path}: {e}")
            self.stats["errors"] += 1
            return None
        logger.debug(f"Opened MaxMind database {path}")
        return reader

    def _get_city_reader(self) -> Optional[geoip2.database.Reader]:
        if self._city_reader is None:
            self._city_reader = self._open_reader(self.city_db_path)
        return self._city_reader

    def _get_asn_reader(self) -> Optional[geoip2.database.Reader]:
        if self._asn_reader is None:
            self._asn_reader = self._open_reader(self.asn_db_path)
        return self._asn_reader

    def lookup_ip(self, ip_address: str) -> MaxMindResult | None:
        """Look up geo and ASN data for an IP address.

        Returns:
            MaxMindResult with whatever data the databases hold, or None if neither knows the address
        """
        self.stats["lookups"] += 1
        result = MaxMindResult(ip_address=ip_address)
        found = False

        city_reader = self._get_city_reader()
        if city_reader is not None:
            try:
                city = city_reader.city(ip_address)
            except geoip2.errors.AddressNotFoundError:
                logger.debug(f"IP {ip_address} not found in City database")
            except ValueError as e:
                logger.error(f"City lookup failed for {ip_address}: {e}")
                self.stats["errors"] += 1
            else:
                self.stats["city_hits"] += 1
                found = True
                result.country_code = city.country.iso_code
                result.country_name = city.country.name
                result.city = city.city.name
                result.postal_code = city.postal.code
                result.latitude = city.location.latitude
                result.longitude = city.location.longitude
                result.time_zone = city.location.time_zone
                result.accuracy_radius = city.location.accuracy_radius
                subdivision = city.subdivisions.most_specific
                result.region = subdivision.name
                result.region_code = subdivision.iso_code

        asn_reader = self._get_asn_reader()
        if asn_reader is not None:
            try:
                asn = asn_reader.asn(ip_address)
            except geoip2.errors.AddressNotFoundError:
                logger.debug(f"IP {ip_address} not found in ASN database")
            except ValueError as e:
                logger.error(f"ASN lookup failed for {ip_address}: {e}")
                self.stats["errors"] += 1
            else:
                self.stats["asn_hits"] += 1
                found = True
                result.asn = asn.autonomous_system_number
                result.asn_org = asn.autonomous_system_organization

        if not found:
            self.stats["not_found"] += 1
            return None
        return result

    def close(self) -> None:
        """Close all database readers and release resources."""
        if self._city_reader is not None:
            self._city_reader.close()
            self._city_reader = None
        if self._asn_reader is not None:
            self._asn_reader.close()
            self._asn_reader = None
        logger.debug("MaxMind client closed")

    def get_stats(self) -> Dict[str, int]:
        """Get client statistics."""
        return dict(self.stats)

    def __enter__(self) -> MaxMindClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - close readers."""
        self.close()


__all__ = ["MaxMindClient", "MaxMindResult"]
