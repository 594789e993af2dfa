"""
Parsers for diagnostic tool output

Each supported tool has one parse function turning its raw text into
an ordered list of unenriched hops. The orchestrator picks the parser
by the format tag of the method that produced the text.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config import EXPECTED_PROBES
from ..enrichment.ip_classifier import IPClassifier
from ..models import Hop


logger = logging.getLogger(__name__)

Parser = Callable[[str], list[Hop]]

# A leading number followed by "ms" is a wrapped timing, not a hop number
HOP_LINE = re.compile(r'^\s*(\d+)\s+(?!ms\b)(.*)$', re.IGNORECASE)
IPV4 = re.compile(r'(?<![\d.])(\d{1,3}(?:\.\d{1,3}){3})(?![\d.])')
DURATION = re.compile(r'(<)?\s*(\d+(?:\.\d+)?)\s*ms\b', re.IGNORECASE)
MTR_LINE = re.compile(
    r'^\s*(\d+)\.\s*(?:\|[`\-]*)?\s*(\S+)\s+([\d.]+)%?\s+(\d+)\s+([\d.]+)\s+([\d.]+)'
)

TRACERT_SKIP = ('Tracing route', 'over a maximum', 'Trace complete')


def first_ipv4(text: str) -> Optional[str]:
    """First valid dotted quad in text"""
    for match in IPV4.finditer(text):
        candidate = match.group(1)
        if IPClassifier.is_valid(candidate):
            return candidate
    return None


def durations(text: str) -> list[float]:
    """All millisecond values in text, '<1 ms' counted as 1"""
    values = []
    for less_than, value in DURATION.findall(text):
        rtt = float(value)
        if less_than:
            rtt = max(rtt, 1.0)
        values.append(rtt)
    return values


@dataclass
class _HopBuilder:
    """Accumulates the probe lines seen for one hop number"""
    hop: int
    ip: Optional[str] = None
    samples: list[float] = field(default_factory=list)

    def add_address(self, ip: Optional[str]):
        # First address wins, later partial lines never clear it
        if ip and self.ip is None:
            self.ip = ip

    def build(self, expected: int = EXPECTED_PROBES) -> Hop:
        if not self.ip:
            return timeout_hop(self.hop)

        if not self.samples:
            return Hop(hop=self.hop, ip=self.ip, rtt=None, loss=100.0,
                       timeout=False, is_private=IPClassifier.is_private(self.ip))

        rtt = sum(self.samples) / len(self.samples)
        loss = (expected - len(self.samples)) / expected * 100
        loss = min(100.0, max(0.0, loss))

        return Hop(
            hop=self.hop,
            ip=self.ip,
            rtt=round(rtt, 3),
            loss=round(loss, 1),
            timeout=False,
            is_private=IPClassifier.is_private(self.ip)
        )


def timeout_hop(number: int) -> Hop:
    """Hop that never answered"""
    return Hop(hop=number, ip=None, rtt=None, loss=100.0, timeout=True)


def _collect(builders: dict[int, _HopBuilder]) -> list[Hop]:
    return [builders[number].build() for number in sorted(builders)]


def _parse_probe_lines(output: str, skip: tuple[str, ...] = ()) -> list[Hop]:
    """
    Shared reader for tracert and traceroute text.

    A line starting with a number opens (or reopens) that hop; indented
    lines without a hop number, including wrapped timings such as
    "3 ms", belong to the hop above them.
    """
    builders: dict[int, _HopBuilder] = {}
    current: Optional[_HopBuilder] = None

    for line in output.splitlines():
        if not line.strip() or any(marker in line for marker in skip):
            continue

        match = HOP_LINE.match(line)
        if match:
            number = int(match.group(1))
            rest = match.group(2)
            current = builders.setdefault(number, _HopBuilder(hop=number))
        elif current is not None and line[:1].isspace():
            rest = line
        else:
            continue

        current.add_address(first_ipv4(rest))
        current.samples.extend(durations(rest))

    return _collect(builders)


def parse_tracert(output: str) -> list[Hop]:
    """
    Parse Windows tracert output.

    Example:
          1    <1 ms    <1 ms    <1 ms  192.168.1.1
          2     *        *        *     Request timed out.
          3    12 ms    11 ms    13 ms  10.0.0.1
    """
    return _parse_probe_lines(output, skip=TRACERT_SKIP)


def parse_traceroute(output: str) -> list[Hop]:
    """
    Parse standard traceroute output (-n).

    Example:
         1  192.168.1.1  1.234 ms  1.100 ms  1.050 ms
         2  * * *
         3  10.0.0.1  5.1 ms *  5.3 ms
    """
    lines = [line for line in output.splitlines()
             if not line.lstrip().startswith('traceroute')]
    return _parse_probe_lines('\n'.join(lines))


def parse_mtr(output: str) -> list[Hop]:
    """
    Parse mtr --report output.

    Example:
        HOST: box                 Loss%   Snt   Last   Avg  Best  Wrst StDev
          1.|-- 192.168.1.1        0.0%     3    1.2   1.3   1.1   1.5   0.2
          2.|-- ???               100.0     3    0.0   0.0   0.0   0.0   0.0

    Rows without a numeric address are dropped.
    """
    hops: dict[int, Hop] = {}

    for line in output.splitlines():
        match = MTR_LINE.match(line)
        if not match:
            continue

        number, address, loss, _sent, last, avg = match.groups()
        if not IPClassifier.is_valid(address):
            logger.debug("Skipping mtr hop %s with unresolved host %r", number, address)
            continue

        number = int(number)
        if number in hops:
            continue

        avg_rtt = float(avg)
        last_rtt = float(last)
        rtt = avg_rtt if avg_rtt > 0 else (last_rtt if last_rtt > 0 else None)

        hops[number] = Hop(
            hop=number,
            ip=address,
            rtt=rtt,
            loss=min(100.0, max(0.0, float(loss))),
            timeout=False,
            is_private=IPClassifier.is_private(address)
        )

    return [hops[number] for number in sorted(hops)]


def parse_tcptraceroute(output: str) -> list[Hop]:
    """
    Parse tcptraceroute output.

    One line per hop with up to three timings; missing timings only
    raise the loss.

    Example:
         1  192.168.1.1  0.512 ms  0.401 ms
         2  * * *
         9  93.184.216.34 [open]  88.1 ms  87.9 ms  88.0 ms
    """
    builders: dict[int, _HopBuilder] = {}

    for line in output.splitlines():
        match = HOP_LINE.match(line)
        if not match:
            continue

        number = int(match.group(1))
        rest = match.group(2)
        builder = builders.setdefault(number, _HopBuilder(hop=number))
        builder.add_address(first_ipv4(rest))
        builder.samples.extend(durations(rest)[:EXPECTED_PROBES])

    return _collect(builders)


PARSERS: dict[str, Parser] = {
    'tracert': parse_tracert,
    'mtr': parse_mtr,
    'traceroute': parse_traceroute,
    'tcptraceroute': parse_tcptraceroute,
}


def parse(fmt: str, output: str) -> list[Hop]:
    """
    Parse tool output by format tag.

    Args:
        fmt: One of PARSERS keys
        output: Raw tool text

    Returns:
        Hops sorted by hop number
    """
    parser = PARSERS.get(fmt)
    if parser is None:
        raise ValueError(
            f"Unknown output format '{fmt}'. "
            f"Supported: {', '.join(PARSERS.keys())}"
        )
    return parser(output or '')
