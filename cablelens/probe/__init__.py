"""
Probe layer for CableLens: tool runner, output parsers, fallback chain
"""

from .parsers import PARSERS, parse
from .runner import ProcessRunner, RunOutput
from .orchestrator import ProbeOrchestrator, ProbeMethod, ProbeReport, build_methods

__all__ = [
    'PARSERS', 'parse',
    'ProcessRunner', 'RunOutput',
    'ProbeOrchestrator', 'ProbeMethod', 'ProbeReport', 'build_methods',
]
