"""
Trace pipeline

resolve -> probe -> trim -> enrich -> classify -> aggregate
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import dns.asyncresolver
import dns.exception

from .analysis import calculate_distances, calculate_total_time, detect_cdn
from .cables import CableStore, RouteClassifier
from .config import DNS_TIMEOUT
from .enrichment import HopEnricher, IPClassifier
from .errors import EnrichmentError, NoHopsError, ResolutionError
from .models import TracePath, TraceResult
from .probe import ProbeOrchestrator


logger = logging.getLogger(__name__)


async def resolve_domain(domain: str, timeout: float = DNS_TIMEOUT) -> str:
    """
    Resolve a domain to its first IPv4 address.

    Raises:
        ResolutionError: no A record could be obtained
    """
    if IPClassifier.is_valid(domain):
        return domain

    resolver = dns.asyncresolver.Resolver()
    resolver.lifetime = timeout

    try:
        answers = await resolver.resolve(domain, 'A')
    except dns.exception.DNSException as e:
        logger.warning("DNS resolution failed for %s: %s", domain, e)
        raise ResolutionError("Could not resolve domain", domain) from e

    for rdata in answers:
        return rdata.address

    raise ResolutionError("Could not resolve domain", domain)


class TraceAnalyzer:
    """
    Turns a probed path into a classified, aggregated result.

    This is the core operation; probing and name resolution live in
    TraceService.
    """

    def __init__(
        self,
        enricher: Optional[HopEnricher] = None,
        classifier: Optional[RouteClassifier] = None
    ):
        self.enricher = enricher or HopEnricher()
        self.classifier = classifier or RouteClassifier(CableStore())

    async def analyze(self, target_ip: str, path: TracePath,
                      target: Optional[str] = None) -> TraceResult:
        """
        Enrich, classify and aggregate a trace path.

        Args:
            target_ip: Address that was traced
            path: Trimmed hops from the probe stage
            target: Name the user asked for, defaults to the address

        Returns:
            TraceResult

        Raises:
            NoHopsError: path is empty
            EnrichmentError: enrichment could not run at all
        """
        target = target or target_ip

        if not path.hops:
            raise NoHopsError("Traceroute failed - no hops returned", target)

        try:
            hops = await self.enricher.enrich(path.hops)
        except Exception as e:
            raise EnrichmentError(f"Hop enrichment failed: {e}", target) from e

        # Classification writes route types the distance split depends on
        cables = await self.classifier.classify(hops)
        distances = calculate_distances(hops)
        total_time = calculate_total_time(hops)
        cdn = detect_cdn(hops)

        logger.info("%s: %d hops, %d km, %d cables",
                    target, len(hops), distances.total, len(cables))

        return TraceResult(
            target=target,
            target_ip=target_ip,
            method=path.method,
            timestamp=datetime.now(),
            hops=hops,
            cables=cables,
            distances=distances,
            total_time=total_time,
            cdn=cdn
        )


class TraceService:
    """
    Full trace for a domain name.

    Collaborators are injected so one set of caches and one cable store
    can serve many traces.
    """

    def __init__(
        self,
        orchestrator: Optional[ProbeOrchestrator] = None,
        analyzer: Optional[TraceAnalyzer] = None,
        dns_timeout: float = DNS_TIMEOUT
    ):
        self.orchestrator = orchestrator or ProbeOrchestrator()
        self.analyzer = analyzer or TraceAnalyzer()
        self.dns_timeout = dns_timeout

    async def trace(self, domain: str) -> TraceResult:
        """
        Trace the route to a domain.

        Raises:
            ResolutionError, NoHopsError, EnrichmentError
        """
        target_ip = await resolve_domain(domain, self.dns_timeout)
        logger.info("Resolved %s -> %s", domain, target_ip)

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, self.orchestrator.run, target_ip)

        path = TracePath.from_hops(report.hops, report.method)
        if not path.hops:
            raise NoHopsError("Traceroute failed - no hops returned", domain)

        return await self.analyzer.analyze(target_ip, path, target=domain)

    async def close(self):
        """Release network clients"""
        await self.analyzer.enricher.close()
        store = self.analyzer.classifier.store
        if store:
            await store.close()
