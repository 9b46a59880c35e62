"""
Pytest tests for simulation results.

Tests verify:
1. Shape validation and label lookup
2. Conversion to per-label time series
3. HDF5 export and import, including overwriting a group
"""

import h5py
import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dhg.src.postprocessing import SimulationResult

LABELS = ('p_v0', 'T_v0', 'm_e0', 'T_end_e0')


@pytest.fixture
def result():
    t = np.linspace(0.0, 10.0, 6)
    u = np.column_stack([
        np.zeros_like(t),
        300.0 + t,
        np.full_like(t, 0.3),
        290.0 + 0.5 * t,
    ])
    return SimulationResult(t=t, u=u, labels=LABELS, attrs={'method': 'BDF', 't_end': 10.0})


class TestSimulationResult:

    def test_state(self, result):
        np.testing.assert_allclose(result.state('T_v0'), 300.0 + result.t)
        np.testing.assert_allclose(result.state('m_e0'), 0.3)

    def test_unknown_label(self, result):
        with pytest.raises(KeyError, match="T_v9"):
            result.state('T_v9')

    def test_final(self, result):
        np.testing.assert_allclose(result.final, [0.0, 310.0, 0.3, 295.0])

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            SimulationResult(t=[0.0, 1.0], u=np.zeros((2, 3)), labels=LABELS)

    def test_steady_state(self):
        u = np.array([0.0, 320.0, 0.3, 315.0])
        result = SimulationResult.steady_state(u, LABELS, dx=10.0)
        assert result.u.shape == (1, 4)
        assert result.attrs == {'dx': 10.0}
        np.testing.assert_allclose(result.final, u)

    def test_to_dict(self, result):
        dct = result.to_dict()
        assert set(dct) == {'t', *LABELS}
        np.testing.assert_allclose(dct['T_end_e0'], 290.0 + 0.5 * result.t)

        # Copies, not views
        dct['t'][0] = -1.0
        assert result.t[0] == 0.0


class TestHDF5:

    def test_round_trip(self, result, tmp_path):
        path = tmp_path / "results.h5"
        result.to_hdf5(path)
        loaded = SimulationResult.from_hdf5(path)

        np.testing.assert_allclose(loaded.t, result.t)
        np.testing.assert_allclose(loaded.u, result.u)
        assert loaded.labels == LABELS
        assert loaded.attrs['method'] == 'BDF'
        assert loaded.attrs['t_end'] == 10.0

    def test_layout(self, result, tmp_path):
        path = tmp_path / "results.h5"
        result.to_hdf5(path, group='transient')
        with h5py.File(path, 'r') as f:
            assert set(f['transient']) == {'t', 'u', 'labels'}
            assert f['transient/u'].shape == (6, 4)

    def test_overwrite_group(self, result, tmp_path):
        path = tmp_path / "results.h5"
        result.to_hdf5(path)
        steady = SimulationResult.steady_state(result.final, LABELS)
        steady.to_hdf5(path)

        loaded = SimulationResult.from_hdf5(path)
        assert loaded.u.shape == (1, 4)

    def test_multiple_groups(self, result, tmp_path):
        path = tmp_path / "results.h5"
        result.to_hdf5(path, group='dx10')
        SimulationResult.steady_state(result.final, LABELS).to_hdf5(path, group='dx5')

        assert SimulationResult.from_hdf5(path, group='dx10').u.shape == (6, 4)
        assert SimulationResult.from_hdf5(path, group='dx5').u.shape == (1, 4)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
