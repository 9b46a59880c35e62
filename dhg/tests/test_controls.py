"""
Pytest tests for control inputs and hydraulic characteristics.

Tests verify:
1. Constant and interpolated controls of time
2. Passthrough characteristic
3. Pump model reproduces its reference operating points
4. Pump affinity: pressure rise scales with speed squared
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dhg.src.controls import PumpModel, constant, interpolated, passthrough

NOMINAL_SPEED = 4100.0
DENSITY = 1064.4


@pytest.fixture
def pump():
    """Pump calibrated from shut-off head and free delivery."""
    return PumpModel((0.0, 40221.0, NOMINAL_SPEED), (0.922, 0.0, NOMINAL_SPEED), DENSITY, NOMINAL_SPEED)


class TestControls:

    def test_constant(self):
        control = constant(3.5)
        assert control(0.0) == 3.5
        assert control(1e6) == 3.5

    def test_interpolated(self):
        control = interpolated([0.0, 10.0, 20.0], [0.0, 100.0, 50.0])
        assert control(5.0) == pytest.approx(50.0)
        assert control(15.0) == pytest.approx(75.0)

    def test_interpolated_held_outside(self):
        control = interpolated([0.0, 10.0], [1.0, 2.0])
        assert control(-5.0) == 1.0
        assert control(50.0) == 2.0

    def test_interpolated_requires_increasing_times(self):
        with pytest.raises(ValueError):
            interpolated([0.0, 10.0, 5.0], [1.0, 2.0, 3.0])

    def test_interpolated_requires_matching_lengths(self):
        with pytest.raises(ValueError):
            interpolated([0.0, 10.0], [1.0, 2.0, 3.0])

    def test_passthrough(self):
        assert passthrough(0.3, 12.0) == 0.3


class TestPumpModel:

    def test_shutoff_pressure(self, pump):
        assert pump(NOMINAL_SPEED, 0.0) == pytest.approx(40221.0, rel=1e-10)

    def test_free_delivery(self, pump):
        assert pump(NOMINAL_SPEED, 0.922) == pytest.approx(0.0, abs=1e-6)

    def test_pressure_decreases_with_flow(self, pump):
        dP = [pump(NOMINAL_SPEED, m) for m in (0.0, 0.3, 0.6, 0.9)]
        assert np.all(np.diff(dP) < 0)

    def test_affinity_law(self, pump):
        """At zero flow the pressure rise scales with speed squared."""
        assert pump(0.5 * NOMINAL_SPEED, 0.0) == pytest.approx(0.25 * 40221.0)

    def test_symmetric_in_massflow(self, pump):
        assert pump(NOMINAL_SPEED, -0.4) == pytest.approx(pump(NOMINAL_SPEED, 0.4))

    def test_coefficients(self, pump):
        V_2 = 0.922 / DENSITY * 6e4  # l/min
        assert pump.c2 == pytest.approx(402.21)
        assert pump.c1 == pytest.approx(-402.21 / V_2**2)

    def test_degenerate_reference_points(self):
        with pytest.raises(ValueError):
            PumpModel((0.0, 1000.0, NOMINAL_SPEED), (0.0, 2000.0, NOMINAL_SPEED), DENSITY, NOMINAL_SPEED)

    def test_invalid_density(self):
        with pytest.raises(ValueError):
            PumpModel((0.0, 1000.0, NOMINAL_SPEED), (1.0, 0.0, NOMINAL_SPEED), 0.0, NOMINAL_SPEED)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
