"""
Unit tests for bootstrap/app.py

Tests building, starting and stopping one quote's engine.
"""

import json

import pytest
from unittest.mock import Mock

from naascalc.bootstrap.app import AppState, NaaSCalcApp, create_app
from naascalc.bootstrap.config import NaaSCalcConfig, OrchestratorConfig
from naascalc.calculators.registry import zero_calculator
from naascalc.core.enums import ComponentType
from naascalc.errors.taxonomy import CalculatorRegistryError


@pytest.fixture
def handlers(calculators):
    return {t: calculators.handler(t.value) for t in ComponentType}


class TestBuild:
    """Tests for NaaSCalcApp.build."""

    def test_build_wires_engine(self, handlers, clock):
        app = NaaSCalcApp(handlers, scheduler=clock).build()

        assert app.state == AppState.BUILT
        assert app.orchestrator.dependency_graph is app.graph
        assert app.store.get_enabled_components() == {}

    def test_build_idempotent(self, handlers, clock):
        app = NaaSCalcApp(handlers, scheduler=clock)
        orchestrator = app.build().orchestrator
        assert app.build().orchestrator is orchestrator

    def test_config_applied(self, handlers, clock):
        config = NaaSCalcConfig(orchestrator=OrchestratorConfig(debounce_ms=5))
        app = NaaSCalcApp(handlers, config=config, scheduler=clock).build()
        assert app.orchestrator.config.debounce_ms == 5

    def test_incomplete_handlers_fail(self, clock):
        app = NaaSCalcApp({"help": zero_calculator}, scheduler=clock)
        with pytest.raises(CalculatorRegistryError):
            app.build()
        assert app.state == AppState.FAILED

    def test_unbuilt_access(self, handlers):
        with pytest.raises(RuntimeError):
            NaaSCalcApp(handlers).orchestrator


class TestLifecycle:
    """Tests for start and stop."""

    @pytest.mark.asyncio
    async def test_store_edits_recalculate(self, handlers, clock, calculators):
        app = NaaSCalcApp(handlers, scheduler=clock)
        listener = Mock()
        await app.start()
        app.on_results(listener)

        app.store.set_component_enabled("prtg", True)
        await clock.run_until_idle()

        assert app.state == AppState.RUNNING
        assert calculators.calls == ["prtg"]
        listener.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_detaches_store(self, handlers, clock, calculators):
        app = NaaSCalcApp(handlers, scheduler=clock)
        await app.start()
        app.store.set_component_enabled("prtg", True)

        await app.stop()
        app.store.set_component_enabled("admin", True)
        await clock.run_until_idle()

        assert app.state == AppState.STOPPED
        assert calculators.calls == []
        assert app.orchestrator.queue_length == 0

    @pytest.mark.asyncio
    async def test_hooks(self, handlers, clock):
        started, stopped = Mock(), Mock()
        app = NaaSCalcApp(handlers, scheduler=clock).on_startup(started).on_shutdown(stopped)

        await app.start()
        await app.stop()

        started.assert_called_once()
        stopped.assert_called_once()


class TestCreateApp:
    """Tests for create_app."""

    def test_loads_config_file(self, handlers, clock, tmp_path):
        path = tmp_path / "naascalc.json"
        path.write_text(json.dumps({"orchestrator": {"max_history_size": 3}}))

        app = create_app(handlers, config_file=str(path), scheduler=clock).build()

        assert app.config.orchestrator.max_history_size == 3
