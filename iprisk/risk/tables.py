"""Static detection tables for the heuristic feature extractor.

All tables are read-only module constants: frozensets for membership tests,
MappingProxyType for lookups, and tuples of compiled patterns for keyword scans.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Pattern, Tuple

# Order matters: the extractor stops at the first matching pattern
VPN_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        # VPN brands
        r"\bvpn\b",
        r"nordvpn",
        r"expressvpn",
        r"surfshark",
        r"cyberghost",
        r"purevpn",
        r"hotspot.*shield",
        r"tunnelbear",
        r"windscribe",
        r"protonvpn",
        # Proxies and Tor
        r"\bproxy\b",
        r"proxies",
        r"anonymous.*proxy",
        r"tor.*exit",
        r"tor.*relay",
        # Hosting and cloud
        r"\bhosting\b",
        r"datacenter",
        r"data.*center",
        r"cloud.*hosting",
        r"digital.*ocean",
        r"amazon.*aws",
        r"google.*cloud",
        r"microsoft.*azure",
        r"linode",
        r"vultr",
        r"\bovh\b",
        r"hetzner",
        r"scaleway",
    )
)

SUSPICIOUS_ASNS = frozenset(
    {
        "AS6939",
        "AS209",
        "AS174",
        "AS3356",
        "AS1299",
        "AS701",
        "AS14061",
        "AS20473",
        "AS63949",
        "AS16276",
        "AS24940",
        "AS16509",
        "AS8075",
        "AS51167",
        "AS8100",
        "AS12876",
    }
)

KNOWN_VPN_ASNS: Mapping[str, str] = MappingProxyType(
    {
        "AS6939": "Hurricane Electric (VPN Infrastructure)",
        "AS14061": "DigitalOcean (VPN Hosting)",
        "AS20473": "Choopa/Vultr (VPN Hosting)",
        "AS63949": "Linode (VPN Hosting)",
        "AS16276": "OVH SAS (VPN Hosting)",
        "AS24940": "Hetzner Online (VPN Hosting)",
        "AS51167": "Contabo (VPN Hosting)",
        "AS12876": "Scaleway (VPN Hosting)",
    }
)

LEGITIMATE_DNS_ASNS = frozenset(
    {
        "AS15169",  # Google
        "AS13335",  # Cloudflare
        "AS36692",  # OpenDNS
        "AS19281",  # Quad9
        "AS1101",  # IBM Quad9
    }
)

LEGITIMATE_ISP_NAMES: Tuple[str, ...] = ("google", "cloudflare", "opendns", "quad9", "amazon cloudfront")

TOR_EXIT_NODES = frozenset(
    {
        "185.220.101.1",
        "185.220.101.2",
        "185.220.102.8",
        "185.100.87.202",
        "199.249.230.68",
        "45.141.215.100",
        "199.87.154.255",
        "23.129.64.1",
        "162.247.74.200",
    }
)

HOSTING_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE) for pattern in ("hosting", "datacenter", "cloud", "server", "vps")
)
