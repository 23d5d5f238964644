"""
Unit tests for errors/taxonomy.py
"""

from naascalc.errors.taxonomy import (
    CalculationErrorRecord,
    CycleDetectedError,
    DependencyGraphError,
    DependencyValidationError,
    ErrorPhase,
    NaaSCalcError,
    UnknownComponentError,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(UnknownComponentError, DependencyGraphError)
        assert issubclass(CycleDetectedError, DependencyGraphError)
        assert issubclass(DependencyGraphError, NaaSCalcError)
        assert issubclass(DependencyValidationError, NaaSCalcError)

    def test_unknown_component_message(self):
        error = UnknownComponentError("bogus")
        assert str(error) == "Unknown component type: bogus"
        assert error.component_type == "bogus"

    def test_cycle_message(self):
        error = CycleDetectedError("naasStandard", ["naasStandard", "dynamics1Year", "naasStandard"])
        assert str(error) == (
            "Circular dependency detected involving naasStandard: "
            "naasStandard -> dynamics1Year -> naasStandard"
        )
        assert str(CycleDetectedError("prtg")) == "Circular dependency detected involving prtg"

    def test_validation_message(self):
        error = DependencyValidationError(["a requires b to be enabled", "c requires d to be enabled"])
        assert str(error) == "Dependency errors: a requires b to be enabled, c requires d to be enabled"
        assert len(error.errors) == 2


class TestCalculationErrorRecord:
    """Tests for structured error records."""

    def test_from_exception(self):
        record = CalculationErrorRecord.from_exception(ErrorPhase.EXECUTION, ValueError("boom"), "capital")

        assert record.phase == ErrorPhase.EXECUTION
        assert record.component == "capital"
        assert record.message == "boom"
        assert record.error_type == "ValueError"
        assert record.details == []

    def test_validation_details(self):
        error = DependencyValidationError(["support requires capital to be enabled"])
        record = CalculationErrorRecord.from_exception(ErrorPhase.VALIDATION, error)

        assert record.details == ["support requires capital to be enabled"]
        assert record.component is None

    def test_to_dict(self):
        data = CalculationErrorRecord.from_exception(ErrorPhase.CASCADE, RuntimeError("x")).to_dict()

        assert data["phase"] == "cascade"
        assert data["error_type"] == "RuntimeError"
        assert len(data["error_id"]) == 8
        assert "T" in data["created_at"]
