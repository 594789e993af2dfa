"""
Probe orchestrator

Walks a fixed fallback chain of system diagnostic tools until one of
them yields hops.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Optional

from ..config import (
    MAX_HOPS,
    MAX_OUTPUT_BYTES,
    WINDOWS_MAX_OUTPUT_BYTES,
    MTR_TIMEOUT,
    TRACEROUTE_TIMEOUT,
    TCPTRACEROUTE_TIMEOUT,
    TRACERT_TIMEOUT,
    TCP_PROBE_PORT,
    EXPECTED_PROBES,
)
from ..models import Hop
from .parsers import parse
from .runner import ProcessRunner, RunOutput


logger = logging.getLogger(__name__)

PERMISSION_MARKERS = (
    'operation not permitted',
    'permission denied',
    'must be root',
    'not enough privileges',
    'requires root',
)


@dataclass
class ProbeMethod:
    """One diagnostic tool invocation"""
    name: str
    fmt: str
    command: list[str]  # '{target}' marks the address slot
    timeout: float
    max_output: int = MAX_OUTPUT_BYTES
    icmp_flags: list[str] = field(default_factory=list)

    def argv(self, target: str, icmp: bool = True) -> list[str]:
        args = [part.format(target=target) for part in self.command]
        if icmp and self.icmp_flags:
            args[1:1] = self.icmp_flags
        return args


@dataclass
class ProbeReport:
    """Hops recovered by the first method that produced any"""
    method: Optional[str] = None
    hops: list[Hop] = field(default_factory=list)
    partial: bool = False


def build_methods(platform: str, max_hops: int = MAX_HOPS) -> list[ProbeMethod]:
    """
    Fallback chain for a platform.

    Args:
        platform: sys.platform style name
        max_hops: Maximum TTL

    Returns:
        Methods in priority order
    """
    probes = str(EXPECTED_PROBES)
    hops = str(max_hops)

    if platform == 'win32':
        return [
            ProbeMethod(
                name='tracert',
                fmt='tracert',
                command=['tracert', '-d', '-h', hops, '-w', '5000', '{target}'],
                timeout=TRACERT_TIMEOUT,
                max_output=WINDOWS_MAX_OUTPUT_BYTES,
            )
        ]

    icmp_flags = ['-P', 'icmp'] if platform == 'darwin' else ['-I']

    return [
        ProbeMethod(
            name='mtr',
            fmt='mtr',
            command=['mtr', '--report', '--report-cycles', probes, '--no-dns', '{target}'],
            timeout=MTR_TIMEOUT,
        ),
        ProbeMethod(
            name='traceroute',
            fmt='traceroute',
            command=['traceroute', '-n', '-q', probes, '-m', hops, '-w', '5', '{target}'],
            timeout=TRACEROUTE_TIMEOUT,
            icmp_flags=icmp_flags,
        ),
        ProbeMethod(
            name='tcptraceroute',
            fmt='tcptraceroute',
            command=['tcptraceroute', '-n', '-q', probes, '-m', hops, '-w', '5',
                     '{target}', str(TCP_PROBE_PORT)],
            timeout=TCPTRACEROUTE_TIMEOUT,
        ),
    ]


class ProbeOrchestrator:
    """
    Runs diagnostic methods in priority order.

    Output of a failed or timed-out attempt is still parsed; the first
    method that yields any hop wins. When nothing yields hops the report
    is empty rather than an exception.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        platform: Optional[str] = None,
        max_hops: int = MAX_HOPS,
        methods: Optional[list[ProbeMethod]] = None
    ):
        self.runner = runner or ProcessRunner()
        self.platform = platform or sys.platform
        self.methods = methods or build_methods(self.platform, max_hops)

    def run(self, target_ip: str) -> ProbeReport:
        """
        Probe the path to an address.

        Args:
            target_ip: Resolved IPv4 address

        Returns:
            ProbeReport, empty hops if every method failed
        """
        for method in self.methods:
            hops, partial = self._attempt(method, target_ip)
            if hops:
                logger.info("%s returned %d hops", method.name, len(hops))
                return ProbeReport(method=method.name, hops=hops, partial=partial)

        logger.warning("All diagnostic methods failed for %s", target_ip)
        return ProbeReport()

    def _attempt(self, method: ProbeMethod, target_ip: str) -> tuple[list[Hop], bool]:
        result = self.runner.run(method.argv(target_ip), method.timeout, method.max_output)

        if method.icmp_flags and not result.ok and self._icmp_denied(result):
            logger.info("%s lacks ICMP permission, retrying without ICMP flags", method.name)
            result = self.runner.run(
                method.argv(target_ip, icmp=False), method.timeout, method.max_output
            )

        if result.error:
            logger.info("%s unavailable: %s", method.name, result.error)
            return [], False

        hops = parse(method.fmt, result.stdout)

        if not result.ok:
            if hops:
                logger.warning(
                    "%s %s, recovered %d hops from partial output",
                    method.name,
                    'timed out' if result.timed_out else f'exited {result.returncode}',
                    len(hops)
                )
            else:
                logger.info("%s failed without usable output", method.name)

        return hops, not result.ok

    @staticmethod
    def _icmp_denied(result: RunOutput) -> bool:
        text = f"{result.stderr}\n{result.stdout}".lower()
        return any(marker in text for marker in PERMISSION_MARKERS)
