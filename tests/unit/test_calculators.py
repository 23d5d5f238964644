"""
Unit tests for calculators/results.py and calculators/registry.py

Tests result validation at the calculator boundary and the component
type to handler table.
"""

import pytest
from pydantic import ValidationError

from naascalc.calculators.registry import CalculatorRegistry, zero_calculator
from naascalc.calculators.results import CalculationResult, CostTotals
from naascalc.core.enums import ComponentType
from naascalc.errors.taxonomy import CalculatorRegistryError, UnknownComponentError


class PricingCalculator:
    """Calculator object exposing one method per formula."""

    def __init__(self):
        self.calls = []

    def _record(self, name, params, context):
        self.calls.append(name)
        return {"totals": {"monthly": 1.0}}

    def calculate_prtg(self, params, context):
        return self._record("prtg", params, context)

    def calculate_capital(self, params, context):
        return self._record("capital", params, context)

    def calculate_support(self, params, context):
        return self._record("support", params, context)

    def calculate_onboarding(self, params, context):
        return self._record("onboarding", params, context)

    def calculate_pbs_foundation(self, params, context):
        return self._record("pbsFoundation", params, context)

    def calculate_assessment(self, params, context):
        return self._record("assessment", params, context)

    def calculate_admin(self, params, context):
        return self._record("admin", params, context)

    def calculate_other_costs(self, params, context):
        return self._record("otherCosts", params, context)

    def calculate_enhanced_support(self, params, context):
        return self._record("enhancedSupport", params, context)

    def calculate_dynamics(self, params, component_type, context):
        return self._record(component_type, params, context)

    def calculate_naas(self, params, component_type, context):
        return self._record(component_type, params, context)


class TestCostTotals:
    """Test CostTotals validation."""

    def test_defaults_zero(self):
        totals = CostTotals()
        assert totals.to_dict() == {"monthly": 0.0, "annual": 0.0, "three_year": 0.0, "one_time": 0.0}

    def test_aliases(self):
        totals = CostTotals(threeYear=36.0, oneTime=5.0)
        assert totals.three_year == 36.0
        assert totals.one_time == 5.0

    def test_field_names_accepted(self):
        assert CostTotals(three_year=3.0).three_year == 3.0

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError):
            CostTotals(monthly=float("inf"))
        with pytest.raises(ValidationError):
            CostTotals(annual=float("nan"))


class TestCalculationResult:
    """Test CalculationResult helpers."""

    def test_zero(self):
        result = CalculationResult.zero()
        assert result.totals == CostTotals()
        assert result.is_error is False
        assert result.breakdown == {}

    def test_failed(self):
        result = CalculationResult.failed("boom")
        assert result.is_error is True
        assert result.error == "boom"
        assert result.totals.monthly == 0.0

    def test_coerce_mapping(self):
        result = CalculationResult.coerce({
            "totals": {"monthly": 10, "annual": 120},
            "breakdown": {"devices": 4},
            "metadata": {"source": "test"},
        })
        assert result.totals.monthly == 10.0
        assert result.breakdown == {"devices": 4}
        assert result.metadata == {"source": "test"}

    def test_coerce_instance_passthrough(self):
        result = CalculationResult.zero()
        assert CalculationResult.coerce(result) is result

    def test_coerce_rejects_other_types(self):
        with pytest.raises(TypeError):
            CalculationResult.coerce(42)

    def test_coerce_rejects_non_finite(self):
        with pytest.raises(ValidationError):
            CalculationResult.coerce({"totals": {"monthly": float("nan")}})

    def test_to_dict(self):
        data = CalculationResult.failed("boom").to_dict()
        assert data["error"] == "boom"
        assert data["totals"]["monthly"] == 0.0


class TestCalculatorRegistry:
    """Test CalculatorRegistry."""

    def test_register_and_get(self):
        registry = CalculatorRegistry()
        registry.register("prtg", zero_calculator)

        assert registry.has_calculator("prtg")
        assert registry.has_calculator(ComponentType.PRTG)
        assert registry.get_calculator("prtg") is zero_calculator
        assert registry.list_calculators() == ["prtg"]

    def test_unknown_type(self):
        registry = CalculatorRegistry()
        with pytest.raises(UnknownComponentError):
            registry.register("bogus", zero_calculator)
        with pytest.raises(UnknownComponentError):
            registry.get_calculator("bogus")
        assert registry.has_calculator("bogus") is False

    def test_unregistered_type(self):
        with pytest.raises(CalculatorRegistryError):
            CalculatorRegistry().get_calculator("capital")

    def test_non_callable_rejected(self):
        with pytest.raises(CalculatorRegistryError):
            CalculatorRegistry({"prtg": "not a function"})

    def test_missing_and_ensure_complete(self):
        registry = CalculatorRegistry({"prtg": zero_calculator})
        assert len(registry.missing()) == 14
        with pytest.raises(CalculatorRegistryError) as exc_info:
            registry.ensure_complete()
        assert "capital" in str(exc_info.value)

    def test_from_calculator_complete(self):
        calculator = PricingCalculator()
        registry = CalculatorRegistry.from_calculator(calculator)

        assert registry.missing() == []
        assert registry.get_calculator("help") is zero_calculator

    def test_variant_handlers_receive_type(self):
        calculator = PricingCalculator()
        registry = CalculatorRegistry.from_calculator(calculator)

        registry.get_calculator("dynamics3Year")({}, {})
        registry.get_calculator("naasEnhanced")({}, {})
        registry.get_calculator("pbsFoundation")({}, {})

        assert calculator.calls == ["dynamics3Year", "naasEnhanced", "pbsFoundation"]

    def test_from_calculator_missing_method(self):
        class Incomplete:
            def calculate_prtg(self, params, context):
                return {}

        with pytest.raises(CalculatorRegistryError) as exc_info:
            CalculatorRegistry.from_calculator(Incomplete())
        assert "calculate_capital" in str(exc_info.value)
