"""
Errors surfaced by the trace pipeline
"""


class TraceError(Exception):
    """Base error for a trace that could not produce usable data"""

    stage = 'trace'

    def __init__(self, message: str, target: str = ''):
        super().__init__(message)
        self.message = message
        self.target = target

    def to_dict(self) -> dict:
        return {'error': self.message, 'stage': self.stage, 'target': self.target}


class ResolutionError(TraceError):
    """Domain name did not resolve to an IPv4 address"""

    stage = 'resolve'


class NoHopsError(TraceError):
    """Every diagnostic method was exhausted without a single hop"""

    stage = 'probe'


class EnrichmentError(TraceError):
    """Enrichment stage could not run at all"""

    stage = 'enrich'
