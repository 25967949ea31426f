"""Command line interface for IP classification and risk lookups."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List

from tqdm import tqdm

from ..service import IPLookupService
from ..settings import KNOWN_PROVIDERS
from ..utils.config import load_lookup_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_INPUT = 2


def _read_addresses(path: Path) -> List[str]:
    addresses: List[str] = []
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            entry = line.split("#", 1)[0].strip()
            if entry:
                addresses.append(entry)
    return addresses


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


def _format_text(address: str, result: Dict[str, Any]) -> List[str]:
    if result.get("error"):
        return [f"{address}: invalid ({result.get('message')})"]
    if not result.get("canGeolocate", False):
        return [f"{address}: {result['type']} - {result['message']}"]

    location = result["location"]
    network = result["network"]
    risk = result["risk"]
    lines = [
        f"{address}: {location['city']}, {location['region']}, {location['country']} ({location['countryCode']})",
        f"  Network: {network['isp']} {network['asn']} ({network['asnOrganization']})",
        f"  Risk: {risk['riskLevel']} ({risk['riskScore']}/100), anonymity {risk['anonymityLevel']}",
    ]
    if risk["factors"]:
        lines.append(f"  Factors: {', '.join(risk['factors'])}")
    if risk.get("vpnService"):
        lines.append(f"  VPN service: {risk['vpnService']}")
    lines.append(f"  Source: {result['dataSource']}{' (cached)' if result.get('cached') else ''}")
    return lines


def main(argv: Iterable[str] | None = None) -> int:
    """Run the lookup CLI and return an exit status."""
    parser = argparse.ArgumentParser(
        description="Classify IP addresses and score VPN/Tor/hosting risk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  iprisk-lookup 8.8.8.8 192.168.1.1
  iprisk-lookup --file addresses.txt --output json --progress
  iprisk-lookup --maxmind-db-dir /var/lib/GeoIP --no-cache 1.1.1.1
        """,
    )
    parser.add_argument("addresses", nargs="*", help="IPv4 or IPv6 addresses to look up")
    parser.add_argument("--file", type=Path, help="File with one address per line (# starts a comment)")
    parser.add_argument("--output", choices=("json", "text"), default="text")
    parser.add_argument("--no-cache", action="store_true", help="Disable the on-disk response cache")
    parser.add_argument("--cache-dir", type=Path, help="Cache directory (default: ~/.cache/iprisk)")
    parser.add_argument("--reverse-dns", action="store_true", help="Resolve PTR hostnames for risk heuristics")
    parser.add_argument(
        "--provider",
        action="append",
        choices=sorted(KNOWN_PROVIDERS),
        help="Geolocation provider, repeat to set the order (default: ip-api then ipapi.co)",
    )
    parser.add_argument("--maxmind-db-dir", type=Path, help="Directory holding GeoLite2-City/ASN .mmdb files")
    parser.add_argument("--progress", action="store_true", help="Show progress bar")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    _configure_logging(args.verbose)

    addresses: List[str] = list(args.addresses)
    if args.file is not None:
        try:
            addresses.extend(_read_addresses(args.file))
        except OSError as e:
            parser.error(f"cannot read {args.file}: {e}")
    if not addresses:
        parser.error("no addresses given")

    overrides: Dict[str, Any] = {
        "cache_dir": args.cache_dir,
        "providers": args.provider,
        "maxmind_db_dir": args.maxmind_db_dir,
    }
    if args.no_cache:
        overrides["enable_cache"] = False
    if args.reverse_dns:
        overrides["reverse_dns"] = True

    try:
        settings = load_lookup_settings(overrides)
    except ValueError as e:
        parser.error(str(e))

    results: Dict[str, Dict[str, Any]] = {}
    with IPLookupService(settings) as service:
        for address in tqdm(addresses, desc="Looking up addresses", disable=not args.progress):
            results.update(service.bulk_lookup([address]))
        logger.debug(f"Lookup stats: {service.get_stats()}")

    if args.output == "json":
        payload: Any = results[addresses[0]] if len(addresses) == 1 else results
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for address, result in results.items():
            for line in _format_text(address, result):
                print(line)

    invalid = [address for address, result in results.items() if result.get("error")]
    if invalid:
        logger.warning(f"{len(invalid)} invalid address(es): {', '.join(invalid)}")
        return EXIT_INVALID_INPUT
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
