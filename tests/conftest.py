"""
Shared fixtures: canned lsof / netstat output and a fake command runner.
"""
import pytest

from portclient.models import CommandOutput

LSOF_TCP = """\
COMMAND   PID USER   FD   TYPE DEVICE SIZE/OFF NODE NAME
node     4321 dev   22u  IPv4 0x1111      0t0  TCP *:8080 (LISTEN)
node     4321 dev   23u  IPv6 0x2222      0t0  TCP [::1]:8081 (LISTEN)
python   5555 dev    5u  IPv4 0x3333      0t0  TCP 127.0.0.1:8082 (LISTEN)
"""

LSOF_TCP_WITH_CLIENT = LSOF_TCP + """\
curl     6001 dev    3u  IPv4 0x4444      0t0  TCP 127.0.0.1:52000->127.0.0.1:8080 (ESTABLISHED)
"""

LSOF_UDP = """\
COMMAND     PID   USER   FD   TYPE DEVICE SIZE/OFF NODE NAME
mDNSResp    311  _mdns    7u  IPv4 0x5555      0t0  UDP *:5353
"""

NETSTAT_LINUX = """\
Active Internet connections (servers and established)
Proto Recv-Q Send-Q Local Address           Foreign Address         State
tcp        0      0 0.0.0.0:8080            0.0.0.0:*               LISTEN
tcp6       0      0 :::3000                 :::*                    LISTEN
tcp        0      0 127.0.0.1:8080          127.0.0.1:5432          ESTABLISHED
"""

NETSTAT_WINDOWS = """\

Active Connections

  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       1000
  TCP    0.0.0.0:8080           0.0.0.0:0              LISTENING       1234
  TCP    [::]:8080              [::]:0                 LISTENING       1234
  TCP    127.0.0.1:8080         127.0.0.1:52000        ESTABLISHED     1234
  TCP    127.0.0.1:52000        127.0.0.1:8080         ESTABLISHED     4321
  TCP    127.0.0.1:9000         127.0.0.1:52001        TIME_WAIT       0
  UDP    0.0.0.0:5353           *:*                                    2222
"""


class FakeRunner:
    """
    Stands in for run_command. Commands are answered from a dict keyed by the
    exact command string; anything else behaves like lsof finding nothing.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, command):
        self.calls.append(command)
        response = self.responses.get(command)
        if response is None:
            return CommandOutput(command=command, stdout="", stderr="", returncode=1)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return CommandOutput(command=command, stdout=response, returncode=0)
        stdout, stderr, returncode = response
        return CommandOutput(command=command, stdout=stdout, stderr=stderr, returncode=returncode)

    def count(self, command):
        return self.calls.count(command)

    def ran_kill(self):
        return any("kill" in call.lower() for call in self.calls)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Points the config loader at an empty temp location for every test."""
    monkeypatch.setenv("PORTCLIENT_CONFIG", str(tmp_path / "portclient.yaml"))
