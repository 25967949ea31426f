"""Static country and ASN mappers.

Pure lookups over fixed tables, each with an explicit default:

- :func:`continent_of` -> continent name, default ``"Unknown"``
- :func:`currency_of` -> ISO 4217 code, default ``"USD"``
- :func:`gdpr_info` -> data protection law and privacy level
- :func:`asn_organization` -> organisation name, default ``"Unknown Organization"``

Country codes are ISO 3166-1 alpha-2 and matched case-insensitively.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

UNKNOWN_CONTINENT = "Unknown"
DEFAULT_CURRENCY = "USD"
UNKNOWN_ORGANIZATION = "Unknown Organization"


def _group(value: str, codes: str) -> Dict[str, str]:
    return {code: value for code in codes.split()}


CONTINENTS: Mapping[str, str] = MappingProxyType(
    {
        **_group(
            "North America",
            "US CA MX GT BZ SV HN NI CR PA CU JM HT DO BS BB TT GD LC VC AG KN DM",
        ),
        **_group(
            "Europe",
            "GB DE FR IT ES NL RU PL SE NO DK FI IS IE PT AT CH BE LU GR CY MT CZ SK HU SI HR BA RS ME MK "
            "AL BG RO MD UA BY LT LV EE VA SM AD MC LI",
        ),
        **_group(
            "Asia",
            "IN CN JP KR TH VN ID MY SG PH TW BD PK LK MM KH LA BN MN KZ KG TJ TM UZ AF IR IQ SY LB JO IL "
            "PS SA YE OM AE QA BH KW TR AM AZ GE NP BT MV",
        ),
        **_group(
            "Africa",
            "NG EG ZA KE MA ET UG DZ SD MZ MG CM CI NE BF ML MW ZM ZW SN SO TD GN RW BJ TN BI ER SL TG CF "
            "LR MR NA BW GA GM GW LS SZ DJ KM CV MU SC ST GQ SS LY AO CD CG",
        ),
        **_group("South America", "BR AR CO PE VE CL EC BO PY UY GY SR GF FK"),
        **_group(
            "Oceania",
            "AU NZ FJ PG SB VU NC PF WS KI TO MH PW FM NR TV CK NU TK AS GU MP UM WF",
        ),
    }
)

CURRENCIES: Mapping[str, str] = MappingProxyType(
    {
        # Major currencies
        "US": "USD", "GB": "GBP", "DE": "EUR", "FR": "EUR", "IT": "EUR", "ES": "EUR",
        "NL": "EUR", "BE": "EUR", "AT": "EUR", "PT": "EUR", "IE": "EUR", "FI": "EUR",
        "GR": "EUR", "LU": "EUR", "MT": "EUR", "CY": "EUR", "SK": "EUR", "SI": "EUR",
        "EE": "EUR", "LV": "EUR", "LT": "EUR", "HR": "EUR", "AD": "EUR", "MC": "EUR",
        "SM": "EUR", "VA": "EUR", "ME": "EUR", "XK": "EUR",
        # Asia
        "IN": "INR", "CN": "CNY", "JP": "JPY", "KR": "KRW", "TH": "THB", "VN": "VND",
        "ID": "IDR", "MY": "MYR", "SG": "SGD", "PH": "PHP", "TW": "TWD", "BD": "BDT",
        "PK": "PKR", "LK": "LKR", "MM": "MMK", "KH": "KHR", "LA": "LAK", "BN": "BND",
        "MN": "MNT", "KZ": "KZT", "KG": "KGS", "TJ": "TJS", "TM": "TMT", "UZ": "UZS",
        "AF": "AFN", "IR": "IRR", "IQ": "IQD", "SY": "SYP", "LB": "LBP", "JO": "JOD",
        "IL": "ILS", "SA": "SAR", "YE": "YER", "OM": "OMR", "AE": "AED", "QA": "QAR",
        "BH": "BHD", "KW": "KWD", "TR": "TRY", "AM": "AMD", "AZ": "AZN", "GE": "GEL",
        "NP": "NPR", "BT": "BTN", "MV": "MVR",
        # Africa
        "NG": "NGN", "EG": "EGP", "ZA": "ZAR", "KE": "KES", "MA": "MAD", "ET": "ETB",
        "UG": "UGX", "DZ": "DZD", "SD": "SDG", "MZ": "MZN", "MG": "MGA", "CM": "XAF",
        "CI": "XOF", "NE": "XOF", "BF": "XOF", "ML": "XOF", "MW": "MWK", "ZM": "ZMW",
        "ZW": "ZWL", "SN": "XOF", "SO": "SOS", "TD": "XAF", "GN": "GNF", "RW": "RWF",
        "BJ": "XOF", "TN": "TND", "BI": "BIF", "ER": "ERN", "SL": "SLL", "TG": "XOF",
        "CF": "XAF", "LR": "LRD", "MR": "MRU", "NA": "NAD", "BW": "BWP", "GA": "XAF",
        "GM": "GMD", "GW": "XOF", "LS": "LSL", "SZ": "SZL", "DJ": "DJF", "KM": "KMF",
        "CV": "CVE", "MU": "MUR", "SC": "SCR", "ST": "STN", "GQ": "XAF", "SS": "SSP",
        "LY": "LYD", "AO": "AOA", "CD": "CDF", "CG": "XAF",
        # Others
        "CA": "CAD", "AU": "AUD", "NZ": "NZD", "CH": "CHF", "NO": "NOK", "SE": "SEK",
        "DK": "DKK", "IS": "ISK", "PL": "PLN", "CZ": "CZK", "HU": "HUF", "RO": "RON",
        "BG": "BGN", "RU": "RUB", "UA": "UAH", "BY": "BYN", "MX": "MXN",
        "BR": "BRL", "AR": "ARS", "CO": "COP", "PE": "PEN", "CL": "CLP", "VE": "VES",
        "EC": "USD", "BO": "BOB", "PY": "PYG", "UY": "UYU", "SR": "SRD", "GY": "GYD",
    }
)  # fmt: skip

GDPR_COUNTRIES = frozenset(
    # EU member states
    "AT BE BG HR CY CZ DK EE FI FR DE GR HU IE IT LV LT LU MT NL PL PT RO SK SI ES SE".split()
    # EEA
    + "IS LI NO".split()
    # GDPR-equivalent regimes
    + "GB CH".split()
)

# country -> (law, full name, scope)
DATA_PROTECTION_LAWS: Mapping[str, Tuple[str, str, str]] = MappingProxyType(
    {
        "US": ("CCPA", "California Consumer Privacy Act", "State-level"),
        "BR": ("LGPD", "Lei Geral de Proteção de Dados", "Federal"),
        "CA": ("PIPEDA", "Personal Information Protection Act", "Federal"),
        "AU": ("Privacy Act", "Privacy Act 1988", "Federal"),
        "JP": ("APPI", "Act on Protection of Personal Information", "Federal"),
        "KR": ("PIPA", "Personal Information Protection Act", "Federal"),
        "IN": ("DPDP", "Digital Personal Data Protection Act", "Federal"),
        "ZA": ("POPIA", "Protection of Personal Information Act", "Federal"),
    }
)

ASN_ORGANIZATIONS: Mapping[str, str] = MappingProxyType(
    {
        "AS15169": "Google LLC",
        "AS13335": "Cloudflare Inc",
        "AS8075": "Microsoft Corporation",
        "AS16509": "Amazon.com Inc",
        "AS32934": "Meta Platforms Inc",
        "AS714": "Apple Inc",
        "AS36459": "GitHub Inc",
        "AS2906": "Netflix Inc",
        "AS14061": "DigitalOcean LLC",
        "AS20473": "Choopa LLC",
        "AS63949": "Linode LLC",
        "AS16276": "OVH SAS",
        "AS24940": "Hetzner Online GmbH",
        "AS51167": "Contabo GmbH",
        "AS12876": "Scaleway S.A.S.",
        "AS55836": "Reliance Jio Infocomm Limited",
        "AS9498": "Bharti Airtel Ltd",
    }
)

_ASN_NUMBER = re.compile(r"AS(\d+)", re.IGNORECASE)


class PrivacyLevel(str, Enum):
    """Privacy regime strength for a country."""

    STANDARD = "standard"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(slots=True, frozen=True)
class GdprInfo:
    """Data protection summary for a country.

    Attributes:
        country_code: Normalised country code
        applicable: Country is covered by GDPR (EU, EEA, GB, CH)
        law: "GDPR", a national law abbreviation, or None
        privacy_level: HIGH under GDPR, MEDIUM under another national law, else STANDARD
        law_name: Full name of a non-GDPR national law
        requires_consent: GDPR countries and the US
    """

    country_code: str
    applicable: bool
    law: Optional[str]
    privacy_level: PrivacyLevel
    law_name: Optional[str] = None
    requires_consent: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "gdprApplicable": self.applicable,
            "countryCode": self.country_code,
            "requiresConsent": self.requires_consent,
            "dataProtectionLaw": self.law,
            "privacyLevel": self.privacy_level.value,
        }
        if self.law_name:
            result["dataProtectionLawName"] = self.law_name
        return result


def _normalize_country(country_code: Optional[str]) -> str:
    return (country_code or "").strip().upper()


def continent_of(country_code: Optional[str]) -> str:
    """Return the continent for a country code, ``"Unknown"`` when unmapped."""
    return CONTINENTS.get(_normalize_country(country_code), UNKNOWN_CONTINENT)


def currency_of(country_code: Optional[str]) -> str:
    """Return the currency for a country code, ``"USD"`` when unmapped."""
    return CURRENCIES.get(_normalize_country(country_code), DEFAULT_CURRENCY)


def gdpr_info(country_code: Optional[str]) -> GdprInfo:
    """Describe the data protection regime for a country.

    Example:
        >>> gdpr_info("DE").law, gdpr_info("DE").privacy_level.value
        ('GDPR', 'high')
        >>> gdpr_info("BR").law
        'LGPD'
    """
    code = _normalize_country(country_code)
    requires_consent = code in GDPR_COUNTRIES or code == "US"

    if code in GDPR_COUNTRIES:
        return GdprInfo(code, True, "GDPR", PrivacyLevel.HIGH, requires_consent=requires_consent)

    national = DATA_PROTECTION_LAWS.get(code)
    if national is not None:
        law, law_name, _scope = national
        return GdprInfo(code, False, law, PrivacyLevel.MEDIUM, law_name=law_name, requires_consent=requires_consent)

    return GdprInfo(code, False, None, PrivacyLevel.STANDARD, requires_consent=requires_consent)


def extract_asn_number(asn: Optional[str]) -> Optional[int]:
    """Extract the number from an ASN string (``AS15169`` -> 15169)."""
    if not asn or asn == "Unknown":
        return None
    match = _ASN_NUMBER.search(str(asn))
    return int(match.group(1)) if match else None


def asn_organization(asn: Optional[str]) -> str:
    """Return the organisation for a well-known ASN, ``"Unknown Organization"`` otherwise."""
    number = extract_asn_number(asn)
    if number is None:
        return UNKNOWN_ORGANIZATION
    return ASN_ORGANIZATIONS.get(f"AS{number}", UNKNOWN_ORGANIZATION)
