"""
Unit tests for the probe fallback chain and subprocess runner.
"""
import subprocess
from unittest.mock import patch

import pytest

from cablelens.probe import ProbeOrchestrator, ProcessRunner, RunOutput, build_methods
from tests.conftest import MTR_OUTPUT, TRACEROUTE_OUTPUT, TRACERT_OUTPUT


class FakeRunner:
    """Returns canned RunOutput per tool name and records each argv"""

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def run(self, argv, timeout, max_output=None):
        self.calls.append(argv)
        result = self.outputs.get(argv[0], RunOutput(error=f"{argv[0]} not found"))
        if callable(result):
            return result(argv)
        return result


class TestBuildMethods:
    """Tests for per-platform fallback chains."""

    def test_windows_uses_tracert_only(self):
        methods = build_methods('win32', max_hops=15)

        assert [m.name for m in methods] == ['tracert']
        assert methods[0].argv('1.2.3.4') == [
            'tracert', '-d', '-h', '15', '-w', '5000', '1.2.3.4'
        ]

    def test_unix_chain_order(self):
        assert [m.name for m in build_methods('linux')] == [
            'mtr', 'traceroute', 'tcptraceroute'
        ]

    def test_linux_icmp_flag(self):
        traceroute = build_methods('linux')[1]

        assert traceroute.argv('1.2.3.4')[:2] == ['traceroute', '-I']
        assert '-I' not in traceroute.argv('1.2.3.4', icmp=False)

    def test_darwin_icmp_flag(self):
        traceroute = build_methods('darwin')[1]
        assert traceroute.argv('1.2.3.4')[1:3] == ['-P', 'icmp']

    def test_tcptraceroute_targets_https_port(self):
        argv = build_methods('linux')[2].argv('1.2.3.4')
        assert argv[-2:] == ['1.2.3.4', '443']


class TestProbeOrchestrator:
    """Tests for method fallback and partial output recovery."""

    def test_first_method_with_hops_wins(self):
        runner = FakeRunner({
            'mtr': RunOutput(stdout=MTR_OUTPUT, returncode=0),
            'traceroute': RunOutput(stdout=TRACEROUTE_OUTPUT, returncode=0),
        })
        report = ProbeOrchestrator(runner=runner, platform='linux').run('93.184.216.34')

        assert report.method == 'mtr'
        assert [hop.hop for hop in report.hops] == [1, 3, 5]
        assert report.partial is False
        assert len(runner.calls) == 1

    def test_missing_tool_falls_through(self):
        runner = FakeRunner({
            'traceroute': RunOutput(stdout=TRACEROUTE_OUTPUT, returncode=0),
        })
        report = ProbeOrchestrator(runner=runner, platform='linux').run('93.184.216.34')

        assert report.method == 'traceroute'
        assert len(report.hops) == 5

    def test_timed_out_output_is_parsed(self):
        partial = "\n".join(TRACERT_OUTPUT.splitlines()[:6])
        runner = FakeRunner({
            'tracert': RunOutput(stdout=partial, timed_out=True),
        })
        report = ProbeOrchestrator(runner=runner, platform='win32').run('93.184.216.34')

        assert report.method == 'tracert'
        assert report.partial is True
        assert [hop.hop for hop in report.hops] == [1, 2]

    def test_timeout_after_six_hops_keeps_them(self):
        lines = [f" {n}  72.14.{n}.1  {n}.000 ms  {n}.100 ms  {n}.200 ms" for n in range(1, 7)]
        runner = FakeRunner({
            'traceroute': RunOutput(stdout="\n".join(lines), timed_out=True),
        })
        report = ProbeOrchestrator(runner=runner, platform='linux').run('93.184.216.34')

        assert report.method == 'traceroute'
        assert [hop.hop for hop in report.hops] == [1, 2, 3, 4, 5, 6]
        assert all(not hop.timeout for hop in report.hops)

    def test_nonzero_exit_without_hops_falls_through(self):
        runner = FakeRunner({
            'mtr': RunOutput(stdout='', stderr='mtr: unable to get raw sockets', returncode=1),
            'tcptraceroute': RunOutput(stdout=TRACEROUTE_OUTPUT, returncode=0),
        })
        report = ProbeOrchestrator(runner=runner, platform='linux').run('93.184.216.34')

        assert report.method == 'tcptraceroute'

    def test_permission_failure_retries_without_icmp(self):
        def traceroute(argv):
            if '-I' in argv:
                return RunOutput(stderr='socket: Operation not permitted', returncode=2)
            return RunOutput(stdout=TRACEROUTE_OUTPUT, returncode=0)

        runner = FakeRunner({'traceroute': traceroute})
        report = ProbeOrchestrator(runner=runner, platform='linux').run('93.184.216.34')

        traceroute_calls = [argv for argv in runner.calls if argv[0] == 'traceroute']
        assert len(traceroute_calls) == 2
        assert '-I' in traceroute_calls[0]
        assert '-I' not in traceroute_calls[1]
        assert report.method == 'traceroute'

    def test_other_failure_does_not_retry(self):
        runner = FakeRunner({
            'traceroute': RunOutput(stderr='unknown host', returncode=2),
        })
        ProbeOrchestrator(runner=runner, platform='linux').run('93.184.216.34')

        assert len([argv for argv in runner.calls if argv[0] == 'traceroute']) == 1

    def test_everything_fails_returns_empty_report(self):
        report = ProbeOrchestrator(runner=FakeRunner({}), platform='linux').run('93.184.216.34')

        assert report.method is None
        assert report.hops == []


class TestProcessRunner:
    """Tests for subprocess handling."""

    def test_success(self):
        completed = subprocess.CompletedProcess(['mtr'], 0, stdout=b'ok\n', stderr=b'')
        with patch('cablelens.probe.runner.subprocess.run', return_value=completed):
            result = ProcessRunner().run(['mtr'], timeout=5)

        assert result.ok
        assert result.stdout == 'ok\n'
        assert result.returncode == 0

    def test_timeout_keeps_partial_stdout(self):
        error = subprocess.TimeoutExpired(['tracert'], 5, output=b' 1  1 ms  10.0.0.1\n')
        with patch('cablelens.probe.runner.subprocess.run', side_effect=error):
            result = ProcessRunner().run(['tracert'], timeout=5)

        assert result.timed_out is True
        assert not result.ok
        assert result.stdout == ' 1  1 ms  10.0.0.1\n'

    def test_output_is_capped(self):
        completed = subprocess.CompletedProcess(['mtr'], 0, stdout=b'x' * 50, stderr=b'')
        with patch('cablelens.probe.runner.subprocess.run', return_value=completed):
            result = ProcessRunner().run(['mtr'], timeout=5, max_output=10)

        assert result.stdout == 'x' * 10

    def test_missing_binary(self):
        with patch('cablelens.probe.runner.subprocess.run', side_effect=FileNotFoundError()):
            result = ProcessRunner().run(['mtr'], timeout=5)

        assert result.error == 'mtr not found'
        assert not result.ok

    @pytest.mark.parametrize("returncode", [1, 2])
    def test_nonzero_exit_is_not_ok(self, returncode):
        completed = subprocess.CompletedProcess(['mtr'], returncode, stdout=b'', stderr=b'')
        with patch('cablelens.probe.runner.subprocess.run', return_value=completed):
            assert not ProcessRunner().run(['mtr'], timeout=5).ok
