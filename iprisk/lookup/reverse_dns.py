"""Reverse DNS (PTR) lookups used as the hostname input for risk heuristics."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import dns.exception
import dns.resolver
import dns.reversename

logger = logging.getLogger(__name__)


class ReverseDNSResolver:
    """Resolve PTR records with a bounded timeout.

    Failures (NXDOMAIN, no answer, timeout) are expected for most addresses and
    return None rather than raising.
    """

    def __init__(self, timeout: float = 2.0, resolver: Optional[dns.resolver.Resolver] = None) -> None:
        self.timeout = timeout
        self._resolver = resolver
        self.stats: Dict[str, int] = {"lookups": 0, "resolved": 0, "not_found": 0, "timeouts": 0, "errors": 0}

    def _get_resolver(self) -> dns.resolver.Resolver:
        if self._resolver is None:
            self._resolver = dns.resolver.Resolver()
            self._resolver.lifetime = self.timeout
        return self._resolver

    def lookup(self, address: str) -> Optional[str]:
        """Return the PTR hostname for an address (without trailing dot), or None."""
        self.stats["lookups"] += 1
        try:
            query_name = dns.reversename.from_address(address)
            answers = self._get_resolver().resolve(query_name, "PTR")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            logger.debug(f"No PTR record for {address}")
            self.stats["not_found"] += 1
            return None
        except dns.exception.Timeout:
            logger.debug(f"PTR lookup timed out for {address}")
            self.stats["timeouts"] += 1
            return None
        except dns.exception.DNSException as e:
            logger.debug(f"PTR lookup failed for {address}: {e}")
            self.stats["errors"] += 1
            return None

        for rdata in answers:
            hostname = rdata.to_text().rstrip(".")
            if hostname:
                self.stats["resolved"] += 1
                return hostname

        self.stats["not_found"] += 1
        return None

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)


def lookup_ptr(address: str, timeout: float = 2.0) -> Optional[str]:
    """One-off PTR lookup."""
    return ReverseDNSResolver(timeout=timeout).lookup(address)


__all__ = ["ReverseDNSResolver", "lookup_ptr"]
