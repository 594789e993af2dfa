"""
Unit tests for console and JSON output.
"""
import io
import json

import pytest
from rich.console import Console

from cablelens.models import CableSegment, CdnInfo, DistanceSummary, Hop, TraceResult
from cablelens.output import ConsoleOutput, JsonExporter, export_json


@pytest.fixture
def result():
    return TraceResult(
        target="example.com",
        target_ip="81.2.69.142",
        method="mtr",
        hops=[
            Hop(hop=1, ip="8.8.8.8", rtt=10.0, lat=40.71, lon=-74.0, city="New York",
                country="United States", country_code="US", asn="AS15169", org="GOOGLE, US",
                is_cdn=True, cdn_provider="Google Cloud", route_type="sea",
                cable_used="atlantic-1", distance_to_next=5570),
            Hop(hop=2, timeout=True, loss=100.0, city="Unknown", country="Unknown"),
            Hop(hop=3, ip="81.2.69.142", rtt=80.12345, lat=51.5, lon=-0.12, city="London",
                country="United Kingdom", country_code="GB", distance_to_next=0),
        ],
        cables=[CableSegment(id="atlantic-1", name="Atlantic One", from_country="United States",
                             to_country="United Kingdom", from_city="New York",
                             to_city="London", hop_range="1-3", distance=5570,
                             from_landing="Tuckerton, NJ, United States")],
        distances=DistanceSummary(total=5570, land=0, sea=5570),
        total_time=80.123,
        cdn=CdnInfo(detected=True, provider="Google Cloud", hop=1),
    )


class TestJsonExporter:

    def test_document_fields(self, result):
        data = JsonExporter().export(result)

        assert data["success"] is True
        assert data["domain"] == "example.com"
        assert data["target_ip"] == "81.2.69.142"
        assert data["total_hops"] == 3
        assert data["sea_distance"] == 5570
        assert data["total_time"] == 80.123
        assert data["has_cdn"] is True
        assert data["cdn_provider"] == "Google Cloud"
        assert data["cables"][0]["name"] == "Atlantic One"
        assert data["meta"]["generator"] == "CableLens"

    def test_hop_serialization(self, result):
        hops = JsonExporter().export(result)["hops"]

        assert hops[0]["cable_used"] == "atlantic-1"
        assert hops[1]["ip"] is None
        assert hops[1]["timeout"] is True
        assert hops[2]["rtt"] == 80.123

    def test_data_sources_recorded_once(self, result):
        exporter = JsonExporter()
        exporter.add_data_source("ip-api.com")
        exporter.add_data_source("ip-api.com")

        assert exporter.export(result)["meta"]["data_sources"] == ["ip-api.com"]

    def test_writes_file(self, result, tmp_path):
        path = tmp_path / "out" / "trace.json"
        export_json(result, path)

        data = json.loads(path.read_text(encoding='utf-8'))
        assert data["hops"][0]["city"] == "New York"


class TestConsoleOutput:

    @pytest.fixture
    def output(self):
        buffer = io.StringIO()
        console = Console(file=buffer, width=200, color_system=None)
        return ConsoleOutput(console), buffer

    def test_results_show_cable_name(self, output, result):
        console_output, buffer = output
        console_output.print_results(result)
        text = buffer.getvalue()

        assert "Atlantic One" in text
        assert "New York, US" in text
        assert "*" in text

    def test_summary(self, output, result):
        console_output, buffer = output
        console_output.print_summary(result)
        text = buffer.getvalue()

        assert "Google Cloud" in text
        assert "80.12 ms" in text

    def test_cables_table_shows_landing_station(self, output, result):
        console_output, buffer = output
        console_output.print_cables(result)
        text = buffer.getvalue()

        assert "Atlantic One" in text
        assert "Tuckerton" in text
        assert "London, United Kingdom" in text

    def test_cables_table_skipped_when_empty(self, output, result):
        console_output, buffer = output
        result.cables = []
        console_output.print_cables(result)

        assert buffer.getvalue() == ""

    def test_error(self, output):
        console_output, buffer = output
        console_output.print_error("Could not resolve domain")

        assert "Could not resolve domain" in buffer.getvalue()
