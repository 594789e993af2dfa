"""
JSON export for CableLens
"""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..models import Hop, TraceResult
from .. import __version__


class JsonExporter:
    """
    Export trace results to JSON format.

    Output format is designed to be both human-readable
    and machine-parseable.
    """

    def __init__(self):
        self.data_sources = []

    def add_data_source(self, source: str):
        """Record data source used"""
        if source not in self.data_sources:
            self.data_sources.append(source)

    def export(self, result: TraceResult, output_path: Optional[Path] = None) -> dict:
        """
        Export trace result to JSON.

        Args:
            result: Trace result
            output_path: Optional file path to write

        Returns:
            JSON-serializable dict
        """
        data = {
            "meta": {
                "version": __version__,
                "generator": "CableLens",
                "data_sources": self.data_sources or [
                    "team_cymru", "ip-api.com", "submarinecablemap.com"
                ],
                "generated_at": datetime.now().isoformat()
            },
            "success": True,
            "domain": result.target,
            "target_ip": result.target_ip,
            "method": result.method,
            "timestamp": result.timestamp.isoformat(),
            "total_hops": result.total_hops,
            "total_distance": result.distances.total,
            "land_distance": result.distances.land,
            "sea_distance": result.distances.sea,
            "total_time": result.total_time,
            "has_cdn": result.cdn.detected,
            "cdn_provider": result.cdn.provider,
            "hops": [self._serialize_hop(hop) for hop in result.hops],
            "cables": [asdict(cable) for cable in result.cables]
        }

        if output_path:
            self._write_file(data, output_path)

        return data

    def _serialize_hop(self, hop: Hop) -> dict:
        """Serialize a single hop"""
        return {
            "hop": hop.hop,
            "ip": hop.ip,
            "rtt": round(hop.rtt, 3) if hop.rtt is not None else None,
            "loss": hop.loss,
            "timeout": hop.timeout,
            "is_private": hop.is_private,
            "lat": hop.lat,
            "lon": hop.lon,
            "city": hop.city,
            "country": hop.country,
            "country_code": hop.country_code,
            "asn": hop.asn,
            "org": hop.org,
            "is_cdn": hop.is_cdn,
            "cdn_provider": hop.cdn_provider,
            "route_type": hop.route_type,
            "cable_used": hop.cable_used,
            "distance_to_next": hop.distance_to_next
        }

    def _write_file(self, data: dict, path: Path):
        """Write JSON to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


def export_json(result: TraceResult, output_path: Optional[Path] = None) -> dict:
    """Convenience function for JSON export"""
    return JsonExporter().export(result, output_path)
