"""Unit tests for FailoverOrchestrator use case."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from hypothesis import given, strategies as st

from pg_failover_monitor.adapters.fakes import (
    FakeCandidateSource,
    FakeDatabaseDriver,
    FakeEventEmitter,
    FakeIntervalTimer,
    FakeLoggingAdapter,
    FakeNode,
    FakePrimaryConfigStore,
    FakeServiceController,
)
from pg_failover_monitor.adapters.ports import CandidateSourcePort, DatabaseConnection
from pg_failover_monitor.adapters.repmgr_server_store import RepmgrServerStore
from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.exceptions import (
    CandidateSourceError,
    DatabaseQueryError,
)
from pg_failover_monitor.domain.failover import FailoverState
from pg_failover_monitor.domain.settings import FailoverSettings
from pg_failover_monitor.usecases.connection_probe import ConnectionProbe
from pg_failover_monitor.usecases.failover_orchestrator import FailoverOrchestrator

STANDBY_HOSTS = ["db2", "db3", "db4", "db5", "db6"]


def make_orchestrator(
    driver: FakeDatabaseDriver,
    config_store: FakePrimaryConfigStore,
    candidates: CandidateSourcePort,
    service_controller: FakeServiceController,
    event_emitter: FakeEventEmitter,
    timer: FakeIntervalTimer,
    logger: FakeLoggingAdapter,
    settings: FailoverSettings | None = None,
) -> FailoverOrchestrator:
    """Helper to wire an orchestrator from fakes."""
    return FailoverOrchestrator(
        settings=settings or FailoverSettings(),
        probe=ConnectionProbe(driver, logger),
        config_store=config_store,
        candidate_source=candidates,
        service_controller=service_controller,
        event_emitter=event_emitter,
        timer=timer,
        logger=logger,
    )


def add_standbys(
    driver: FakeDatabaseDriver, candidates: FakeCandidateSource, hosts: list[str]
) -> None:
    """Register hosts as reachable standbys still in recovery."""
    for host in hosts:
        driver.add_node(FakeNode(host, in_recovery=True))
        candidates.standbys.append(ConnectionParams.of(host=host))


def promote(driver: FakeDatabaseDriver, candidates: FakeCandidateSource, host: str) -> None:
    """Make host a writable primary that repmgr marks as primary."""
    driver.node(host).in_recovery = False
    candidates.marked_primary_hosts.add(host)


@pytest.fixture
def orchestrator(
    driver: FakeDatabaseDriver,
    config_store: FakePrimaryConfigStore,
    candidates: FakeCandidateSource,
    service_controller: FakeServiceController,
    event_emitter: FakeEventEmitter,
    timer: FakeIntervalTimer,
    logger: FakeLoggingAdapter,
) -> FailoverOrchestrator:
    return make_orchestrator(
        driver, config_store, candidates, service_controller, event_emitter, timer, logger
    )


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
class TestHealthyPrimary:
    """Test the steady state: the configured primary answers."""

    def test_reachable_primary_is_healthy(self, orchestrator: FailoverOrchestrator) -> None:
        result = orchestrator.run_health_check()

        assert result.state is FailoverState.HEALTHY
        assert result.attempts == 0
        assert not result.failover_executed

    def test_healthy_check_has_no_side_effects_on_application(
        self,
        orchestrator: FailoverOrchestrator,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        config_store: FakePrimaryConfigStore,
        timer: FakeIntervalTimer,
    ) -> None:
        orchestrator.run_health_check()

        assert service_controller.calls == []
        assert event_emitter.events == []
        assert config_store.writes == []
        assert timer.waits == []

    def test_snapshot_is_refreshed_from_primary(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
    ) -> None:
        orchestrator.run_health_check()

        assert candidates.refreshed_with == driver.connections

    def test_primary_connection_is_released(
        self, orchestrator: FailoverOrchestrator, driver: FakeDatabaseDriver
    ) -> None:
        orchestrator.run_health_check()

        assert [c.close_count for c in driver.connections] == [1]

    def test_refresh_failure_is_logged_and_still_healthy(
        self,
        orchestrator: FailoverOrchestrator,
        candidates: FakeCandidateSource,
        logger: FakeLoggingAdapter,
    ) -> None:
        candidates.refresh_error = CandidateSourceError("disk full")

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.HEALTHY
        assert logger.contains("disk full", level="warning")

    def test_primary_in_recovery_is_still_healthy(
        self, orchestrator: FailoverOrchestrator, driver: FakeDatabaseDriver
    ) -> None:
        driver.node("db1").in_recovery = True

        assert orchestrator.run_health_check().state is FailoverState.HEALTHY

    def test_config_is_read_on_every_check(
        self, orchestrator: FailoverOrchestrator, config_store: FakePrimaryConfigStore
    ) -> None:
        orchestrator.run_health_check()
        orchestrator.run_health_check()

        assert config_store.read_count == 2


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
class TestSuccessfulFailover:
    """Test an episode that finds a promoted standby."""

    @pytest.fixture(autouse=True)
    def primary_down(self, driver: FakeDatabaseDriver, candidates: FakeCandidateSource) -> None:
        driver.node("db1").reachable = False
        add_standbys(driver, candidates, STANDBY_HOSTS)

    def test_third_candidate_wins(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        config_store: FakePrimaryConfigStore,
    ) -> None:
        promote(driver, candidates, "db4")

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.CUTOVER_COMPLETE
        assert result.attempts == 1
        assert result.new_primary is not None
        assert result.new_primary.host == "db4"
        assert [p.host for p in config_store.writes] == ["db4"]
        assert driver.connect_attempts == ["db1", "db2", "db3", "db4"]

    def test_application_stopped_then_restarted(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        service_controller: FakeServiceController,
    ) -> None:
        promote(driver, candidates, "db2")

        orchestrator.run_health_check()

        assert service_controller.calls == ["stop", "restart"]

    def test_exactly_one_event_emitted(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        event_emitter: FakeEventEmitter,
    ) -> None:
        promote(driver, candidates, "db2")

        orchestrator.run_health_check()

        assert [e.name for e in event_emitter.events] == ["db_failover_executed"]

    def test_written_params_carry_template_credentials(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        config_store: FakePrimaryConfigStore,
    ) -> None:
        promote(driver, candidates, "db3")

        orchestrator.run_health_check()

        written = config_store.writes[0]
        assert written.values["user"] == "root"
        assert written.values["password"] == "smartvm"
        assert written.values["dbname"] == "vmdb_production"

    def test_every_probe_connection_released_once(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
    ) -> None:
        promote(driver, candidates, "db5")

        orchestrator.run_health_check()

        assert driver.connections
        assert all(c.close_count == 1 for c in driver.connections)

    def test_snapshot_refreshed_from_new_primary(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
    ) -> None:
        promote(driver, candidates, "db3")

        orchestrator.run_health_check()

        assert [c.node.host for c in candidates.refreshed_with] == ["db3"]

    def test_no_wait_when_first_pass_succeeds(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        timer: FakeIntervalTimer,
    ) -> None:
        promote(driver, candidates, "db2")

        orchestrator.run_health_check()

        assert timer.waits == []

    def test_logs_without_password(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        logger: FakeLoggingAdapter,
    ) -> None:
        promote(driver, candidates, "db2")

        orchestrator.run_health_check()

        assert logger.contains("Primary Database is not available", level="error")
        assert logger.contains("Failing over to server using conninfo", level="info")
        assert logger.contains("Starting EVM server from failover monitor", level="info")
        assert not logger.contains("smartvm")

    def test_first_qualifying_candidate_wins_tie(
        self,
        orchestrator: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        config_store: FakePrimaryConfigStore,
    ) -> None:
        promote(driver, candidates, "db3")
        promote(driver, candidates, "db5")

        orchestrator.run_health_check()

        assert [p.host for p in config_store.writes] == ["db3"]
        assert "db5" not in driver.connect_attempts

    def test_promotion_found_on_later_pass(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        candidates: FakeCandidateSource,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        logger: FakeLoggingAdapter,
    ) -> None:
        class PromotingTimer(FakeIntervalTimer):
            def wait(self, seconds: float) -> bool:
                stopped = super().wait(seconds)
                if len(self.waits) == 2:
                    promote(driver, candidates, "db6")
                return stopped

        timer = PromotingTimer()
        orchestrator = make_orchestrator(
            driver, config_store, candidates, service_controller, event_emitter, timer, logger
        )

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.CUTOVER_COMPLETE
        assert result.attempts == 3
        assert timer.waits == [60, 60]
        assert candidates.list_calls == 3
        assert logger.contains("attempt 3 of 10", level="info")


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
class TestCandidateEligibility:
    """Test the three-part qualification of a candidate."""

    @pytest.fixture(autouse=True)
    def primary_down(self, driver: FakeDatabaseDriver, candidates: FakeCandidateSource) -> None:
        driver.node("db1").reachable = False
        add_standbys(driver, candidates, ["db2"])

    @pytest.fixture
    def one_attempt(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        candidates: FakeCandidateSource,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        timer: FakeIntervalTimer,
        logger: FakeLoggingAdapter,
    ) -> FailoverOrchestrator:
        return make_orchestrator(
            driver,
            config_store,
            candidates,
            service_controller,
            event_emitter,
            timer,
            logger,
            settings=FailoverSettings(failover_attempts=1, failover_check_frequency=1),
        )

    def test_standby_in_recovery_does_not_qualify(
        self, one_attempt: FailoverOrchestrator, candidates: FakeCandidateSource
    ) -> None:
        candidates.marked_primary_hosts.add("db2")

        assert one_attempt.run_health_check().state is FailoverState.CUTOVER_FAILED

    def test_writable_but_not_marked_primary_does_not_qualify(
        self, one_attempt: FailoverOrchestrator, driver: FakeDatabaseDriver
    ) -> None:
        driver.node("db2").in_recovery = False

        result = one_attempt.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED

    def test_unknown_recovery_status_does_not_qualify(
        self,
        one_attempt: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        logger: FakeLoggingAdapter,
    ) -> None:
        driver.node("db2").recovery_check_fails = True
        candidates.marked_primary_hosts.add("db2")

        result = one_attempt.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED
        assert candidates.marked_primary_checks == []
        assert logger.contains("Failed to check recovery status", level="error")

    def test_unreachable_candidate_is_skipped(
        self,
        one_attempt: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
    ) -> None:
        promote(driver, candidates, "db2")
        driver.node("db2").reachable = False

        assert one_attempt.run_health_check().state is FailoverState.CUTOVER_FAILED

    def test_marked_primary_query_failure_does_not_qualify(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        timer: FakeIntervalTimer,
        logger: FakeLoggingAdapter,
    ) -> None:
        class BrokenRepmgr(FakeCandidateSource):
            def is_marked_primary(
                self, candidate: ConnectionParams, connection: DatabaseConnection
            ) -> bool:
                raise DatabaseQueryError("relation repmgr.nodes does not exist", sql="...")

        driver.node("db2").in_recovery = False
        candidates = BrokenRepmgr([ConnectionParams.of(host="db2")])
        orchestrator = make_orchestrator(
            driver,
            config_store,
            candidates,
            service_controller,
            event_emitter,
            timer,
            logger,
            settings=FailoverSettings(failover_attempts=1),
        )

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED
        assert logger.contains("Cannot confirm db2 is marked primary", level="error")
        assert all(c.close_count == 1 for c in driver.connections)


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
class TestFailedFailover:
    """Test episodes that end without a new primary."""

    @pytest.fixture(autouse=True)
    def primary_down(self, driver: FakeDatabaseDriver, candidates: FakeCandidateSource) -> None:
        driver.node("db1").reachable = False
        add_standbys(driver, candidates, ["db2", "db3"])

    @pytest.fixture
    def three_attempts(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        candidates: FakeCandidateSource,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        timer: FakeIntervalTimer,
        logger: FakeLoggingAdapter,
    ) -> FailoverOrchestrator:
        return make_orchestrator(
            driver,
            config_store,
            candidates,
            service_controller,
            event_emitter,
            timer,
            logger,
            settings=FailoverSettings(failover_attempts=3, failover_check_frequency=7),
        )

    def test_exhaustion_runs_every_pass(
        self,
        three_attempts: FailoverOrchestrator,
        candidates: FakeCandidateSource,
        timer: FakeIntervalTimer,
    ) -> None:
        result = three_attempts.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED
        assert result.attempts == 3
        assert candidates.list_calls == 3
        assert timer.waits == [7, 7, 7]

    def test_exhaustion_leaves_application_stopped(
        self,
        three_attempts: FailoverOrchestrator,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        config_store: FakePrimaryConfigStore,
        logger: FakeLoggingAdapter,
    ) -> None:
        three_attempts.run_health_check()

        assert service_controller.calls == ["stop"]
        assert event_emitter.events == []
        assert config_store.writes == []
        assert logger.contains("Failover failed", level="error")

    def test_every_candidate_re_evaluated_each_pass(
        self, three_attempts: FailoverOrchestrator, driver: FakeDatabaseDriver
    ) -> None:
        three_attempts.run_health_check()

        assert driver.connect_attempts == ["db1"] + ["db2", "db3"] * 3

    def test_empty_candidate_list_still_waits_each_pass(
        self,
        three_attempts: FailoverOrchestrator,
        candidates: FakeCandidateSource,
        timer: FakeIntervalTimer,
    ) -> None:
        candidates.standbys.clear()

        result = three_attempts.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED
        assert timer.waits == [7, 7, 7]

    def test_write_failure_ends_episode(
        self,
        three_attempts: FailoverOrchestrator,
        driver: FakeDatabaseDriver,
        candidates: FakeCandidateSource,
        config_store: FakePrimaryConfigStore,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        logger: FakeLoggingAdapter,
    ) -> None:
        promote(driver, candidates, "db2")
        config_store.write_error = "Permission denied"

        result = three_attempts.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED
        assert result.attempts == 1
        assert "Permission denied" in (result.error or "")
        assert service_controller.calls == ["stop"]
        assert event_emitter.events == []
        assert logger.contains("Permission denied", level="error")
        assert all(c.close_count == 1 for c in driver.connections)

    def test_zero_attempts_fails_without_searching(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        candidates: FakeCandidateSource,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        timer: FakeIntervalTimer,
        logger: FakeLoggingAdapter,
    ) -> None:
        orchestrator = make_orchestrator(
            driver,
            config_store,
            candidates,
            service_controller,
            event_emitter,
            timer,
            logger,
            settings=FailoverSettings(failover_attempts=0),
        )

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.CUTOVER_FAILED
        assert result.attempts == 0
        assert driver.connect_attempts == ["db1"]
        assert service_controller.calls == ["stop"]

    def test_unexpected_error_propagates(
        self, three_attempts: FailoverOrchestrator, driver: FakeDatabaseDriver
    ) -> None:
        driver.fail_connections_with(RuntimeError("driver bug"))

        with pytest.raises(RuntimeError, match="driver bug"):
            three_attempts.run_health_check()


ROWS_WITH_UNPARSABLE_CONNINFO = [
    ("standby", "host=db3 port", True),
    ("primary", "host=db2 port=5432 dbname=vmdb_production user=root", True),
    ("standby", "host=db1 port=5432 dbname=vmdb_production user=root", False),
]


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
class TestRepmgrCandidateSource:
    """Test health checks against the repmgr-backed candidate source."""

    @pytest.fixture
    def repmgr_store(self, tmp_path: Path, logger: FakeLoggingAdapter) -> RepmgrServerStore:
        store = RepmgrServerStore(tmp_path / "failover_databases.yml", logger)
        store.path.write_text(
            yaml.safe_dump(
                [
                    {"type": "primary", "active": True, "host": "db1", "port": 5432},
                    {"type": "standby", "active": True, "host": "db2", "port": 5432},
                ]
            )
        )
        return store

    def test_unparsable_conninfo_does_not_abort_failover(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        repmgr_store: RepmgrServerStore,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        timer: FakeIntervalTimer,
        logger: FakeLoggingAdapter,
    ) -> None:
        driver.node("db1").reachable = False
        driver.add_node(
            FakeNode("db2", in_recovery=False, repmgr_rows=list(ROWS_WITH_UNPARSABLE_CONNINFO))
        )
        orchestrator = make_orchestrator(
            driver,
            config_store,
            repmgr_store,
            service_controller,
            event_emitter,
            timer,
            logger,
            settings=FailoverSettings(failover_attempts=1),
        )

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.CUTOVER_COMPLETE
        assert [p.host for p in config_store.writes] == ["db2"]
        assert [s.host for s in repmgr_store.list_standbys()] == ["db2"]
        assert service_controller.calls == ["stop", "restart"]
        assert logger.contains("Skipping repmgr standby node", level="warning")

    def test_unparsable_conninfo_keeps_primary_healthy(
        self,
        driver: FakeDatabaseDriver,
        config_store: FakePrimaryConfigStore,
        repmgr_store: RepmgrServerStore,
        service_controller: FakeServiceController,
        event_emitter: FakeEventEmitter,
        timer: FakeIntervalTimer,
        logger: FakeLoggingAdapter,
    ) -> None:
        driver.node("db1").repmgr_rows = [
            ("primary", "host=db1 port=5432 dbname=vmdb_production user=root", True),
            ("standby", "host=db3 port", True),
        ]
        orchestrator = make_orchestrator(
            driver,
            config_store,
            repmgr_store,
            service_controller,
            event_emitter,
            timer,
            logger,
        )

        result = orchestrator.run_health_check()

        assert result.state is FailoverState.HEALTHY
        assert [s.host for s in repmgr_store.list_standbys()] == ["db1"]
        assert service_controller.calls == []


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
class TestCandidateParams:
    """Test candidate list construction."""

    def test_standbys_inherit_template_values(
        self, orchestrator: FailoverOrchestrator, candidates: FakeCandidateSource
    ) -> None:
        candidates.standbys = [ConnectionParams.of(host="db2", port=5433)]
        template = ConnectionParams.of(host="db1", user="root", password="smartvm")

        params = orchestrator.candidate_params(template)

        assert [p.as_dict() for p in params] == [
            {"host": "db2", "port": 5433, "user": "root", "password": "smartvm"}
        ]

    def test_preserves_candidate_order(
        self, orchestrator: FailoverOrchestrator, candidates: FakeCandidateSource
    ) -> None:
        candidates.standbys = [ConnectionParams.of(host=h) for h in ["db9", "db2", "db5"]]

        params = orchestrator.candidate_params(ConnectionParams.of(host="db1"))

        assert [p.host for p in params] == ["db9", "db2", "db5"]


@pytest.mark.unit
@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.FailoverOrchestrator")
@pytest.mark.property
class TestFailoverProperties:
    """Property-based tests for the candidate tie-break."""

    @given(qualifying=st.lists(st.booleans(), min_size=1, max_size=8))
    def test_first_qualifying_candidate_in_order_wins(self, qualifying: list[bool]) -> None:
        primary = ConnectionParams.of(host="db0", password="secret")
        driver = FakeDatabaseDriver()
        candidates = FakeCandidateSource()
        hosts = [f"db{i + 1}" for i in range(len(qualifying))]
        add_standbys(driver, candidates, hosts)
        for host, qualifies in zip(hosts, qualifying):
            if qualifies:
                promote(driver, candidates, host)
        config_store = FakePrimaryConfigStore(primary)
        event_emitter = FakeEventEmitter()
        orchestrator = make_orchestrator(
            driver,
            config_store,
            candidates,
            FakeServiceController(),
            event_emitter,
            FakeIntervalTimer(),
            FakeLoggingAdapter(),
            settings=FailoverSettings(failover_attempts=1),
        )

        result = orchestrator.run_health_check()

        if any(qualifying):
            expected = hosts[qualifying.index(True)]
            assert result.state is FailoverState.CUTOVER_COMPLETE
            assert [p.host for p in config_store.writes] == [expected]
            assert len(event_emitter.events) == 1
        else:
            assert result.state is FailoverState.CUTOVER_FAILED
            assert config_store.writes == []
            assert event_emitter.events == []
        assert all(c.close_count == 1 for c in driver.connections)
