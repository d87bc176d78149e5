import pytest

from portclient.errors import ProbeUnavailable
from portclient.models import OperationConfig, ParseStrategy, Protocol, SpeedMode
from portclient.oracle import ExistenceOracle
from portclient.probe import SystemProbe

from conftest import FakeRunner, LSOF_TCP, LSOF_TCP_WITH_CLIENT, LSOF_UDP, NETSTAT_WINDOWS

LIST_TCP = "lsof -i tcp -P -n"


def make_oracle(responses, system="Linux", **options):
    runner = FakeRunner(responses)
    probe = SystemProbe(runner=runner, system=system)
    return ExistenceOracle(probe, OperationConfig.from_options(options)), runner


def test_safe_mode_membership():
    oracle, _ = make_oracle({LIST_TCP: LSOF_TCP})
    assert oracle.is_active(8080)
    assert oracle.is_active(8082)
    assert not oracle.is_active(9999)


def test_safe_mode_fetches_listing_once():
    oracle, runner = make_oracle({LIST_TCP: LSOF_TCP})
    for port in (8080, 8081, 9999, 8080):
        oracle.is_active(port)
    assert runner.count(LIST_TCP) == 1


def test_safe_mode_strategies_share_one_fetch():
    oracle, runner = make_oracle({LIST_TCP: LSOF_TCP_WITH_CLIENT})
    assert oracle.is_active(8080, ParseStrategy.GENERAL_LISTING)
    assert oracle.is_active(8080, ParseStrategy.PROTOCOL_SCOPED_LISTING)
    assert runner.count(LIST_TCP) == 1


def test_safe_mode_probe_failure_is_inactive_and_not_retried():
    oracle, runner = make_oracle({LIST_TCP: ("", "lsof: not found", 127)})
    assert not oracle.is_active(8080)
    assert not oracle.is_active(8081)
    assert runner.count(LIST_TCP) == 1


def test_active_ports_raises_when_listing_fails():
    oracle, _ = make_oracle({LIST_TCP: ("", "lsof: not found", 127)})
    with pytest.raises(ProbeUnavailable):
        oracle.active_ports()


def test_active_ports_are_distinct():
    oracle, _ = make_oracle({LIST_TCP: LSOF_TCP_WITH_CLIENT})
    assert oracle.active_ports() == ["8080", "8081", "8082", "52000"]


def test_udp_uses_scoped_dialect():
    oracle, runner = make_oracle({"lsof -i udp -P -n": LSOF_UDP}, method="udp")
    assert oracle.check_strategy is ParseStrategy.PROTOCOL_SCOPED_LISTING
    assert oracle.is_active(5353)
    assert runner.calls == ["lsof -i udp -P -n"]


def test_fast_mode_probes_each_port():
    oracle, runner = make_oracle({"lsof -i tcp:8080 -P -n": LSOF_TCP}, speed="fast")
    assert oracle.is_active(8080)
    assert not oracle.is_active(8081)
    assert runner.calls == ["lsof -i tcp:8080 -P -n", "lsof -i tcp:8081 -P -n"]


def test_fast_mode_requires_listen_marker():
    residue = (
        "COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME\n"
        "node 4321 dev 22u IPv4 0x1 0t0 TCP 127.0.0.1:8080->127.0.0.1:52000 (CLOSE_WAIT)\n"
    )
    oracle, _ = make_oracle({"lsof -i tcp:8080 -P -n": residue}, speed="fast")
    assert not oracle.is_active(8080)


def test_fast_mode_udp_counts_any_socket():
    oracle, _ = make_oracle({"lsof -i udp:5353 -P -n": LSOF_UDP}, method="udp", speed="fast")
    assert oracle.is_active(5353)


def test_fast_mode_probe_failure_is_inactive():
    oracle, _ = make_oracle({"lsof -i tcp:8080 -P -n": FileNotFoundError("sh")}, speed="fast")
    assert not oracle.is_active(8080)


def test_fast_mode_windows_ignores_time_wait():
    oracle, _ = make_oracle({"netstat -nao": NETSTAT_WINDOWS}, system="Windows", speed=SpeedMode.FAST)
    assert oracle.is_active(8080)
    assert not oracle.is_active(9000)


def test_safe_mode_windows_membership():
    oracle, _ = make_oracle({"netstat -nao": NETSTAT_WINDOWS}, system="Windows")
    assert oracle.is_active(8080)
    assert not oracle.is_active(8081)


def test_owners_carry_pids():
    oracle, _ = make_oracle({LIST_TCP: LSOF_TCP})
    assert [record.pid for record in oracle.owners(8082)] == [5555]


def test_check_is_idempotent():
    responses = {LIST_TCP: LSOF_TCP}
    first, _ = make_oracle(responses)
    second, _ = make_oracle(responses)
    assert [first.is_active(p) for p in (8080, 9999)] == [second.is_active(p) for p in (8080, 9999)]


def test_protocol_enum_passthrough():
    oracle, _ = make_oracle({}, method=Protocol.TCP)
    assert oracle.config.protocol is Protocol.TCP


def test_fast_mode_active_ports_only_probes_given_ports():
    oracle, runner = make_oracle(
        {"lsof -i tcp:8080 -P -n": LSOF_TCP, "lsof -i tcp:9999 -P -n": ""},
        speed="fast",
    )
    assert oracle.active_ports([8080, 9999]) == ["8080"]
    assert runner.calls == ["lsof -i tcp:8080 -P -n", "lsof -i tcp:9999 -P -n"]


def test_fast_mode_active_ports_raises_when_probe_fails():
    oracle, _ = make_oracle({"lsof -i tcp:8080 -P -n": ("", "lsof: not found", 127)}, speed="fast")
    with pytest.raises(ProbeUnavailable):
        oracle.active_ports([8080])
