"""
Unit tests for the path integrals: TEC and bending angle.
"""

import math
import pytest
import numpy as np
from unittest.mock import MagicMock


class TestTECIntegrator:
    """Test midpoint-rule TEC integration."""

    def test_uniform_density_overhead(self, station_equator, spacecraft_overhead, body_radius, epoch_2024):
        """Uniform density over a 2000 km zenith path gives rho * 2e6 m."""
        from iono_correction.physics.shell_geometry import intersect_shell
        from iono_correction.physics.tec_integrator import TECIntegrator

        segment = intersect_shell(station_equator, spacecraft_overhead, body_radius)
        integrator = TECIntegrator(lambda pos, epoch: 1.0e12)

        assert integrator.integrate(segment, epoch_2024) == pytest.approx(2.0e18, rel=1e-9)

    def test_samples_midpoints(self, station_equator, body_radius, epoch_2024):
        """Density is sampled once per interval at interval midpoints."""
        from iono_correction.physics.shell_geometry import intersect_shell
        from iono_correction.physics.tec_integrator import TECIntegrator

        segment = intersect_shell(station_equator, [body_radius + 1000.0, 0.0, 0.0], body_radius)
        density_fn = MagicMock(return_value=1.0)
        TECIntegrator(density_fn, num_intervals=4).integrate(segment, epoch_2024)

        assert density_fn.call_count == 4
        first_point, first_epoch = density_fn.call_args_list[0][0]
        np.testing.assert_allclose(first_point, [body_radius + 125.0, 0.0, 0.0])
        assert first_epoch == epoch_2024

    def test_no_segment_gives_zero_without_sampling(self, epoch_2024):
        """A path that misses the shell never touches the density model."""
        from iono_correction.physics.tec_integrator import TECIntegrator

        density_fn = MagicMock(return_value=1.0e12)

        assert TECIntegrator(density_fn).integrate(None, epoch_2024) == 0.0
        density_fn.assert_not_called()

    def test_swapped_path_same_tec(self, station_equator, spacecraft_oblique, body_radius,
                                   chapman_density, epoch_2024):
        """TEC does not depend on which end is the station."""
        from iono_correction.physics.shell_geometry import intersect_shell
        from iono_correction.physics.tec_integrator import TECIntegrator

        integrator = TECIntegrator(chapman_density)
        forward = integrator.integrate(
            intersect_shell(station_equator, spacecraft_oblique, body_radius), epoch_2024)
        backward = integrator.integrate(
            intersect_shell(spacecraft_oblique, station_equator, body_radius), epoch_2024)

        assert forward > 0.0
        assert backward == pytest.approx(forward, rel=1e-9)

    def test_rejects_zero_intervals(self):
        from iono_correction.physics.tec_integrator import TECIntegrator

        with pytest.raises(ValueError):
            TECIntegrator(lambda pos, epoch: 0.0, num_intervals=0)


class TestBendingAngleSolver:
    """Test the backward refraction trace."""

    def test_refractive_index(self):
        from iono_correction.physics.bending_angle import refractive_index

        assert refractive_index(0.0, 2.295e9) == 1.0
        assert refractive_index(1.0e12, 1.0e9) == pytest.approx(1.0 - 40.3e-6)

    def test_no_segment_gives_zero(self, epoch_2024):
        from iono_correction.physics.bending_angle import BendingAngleSolver

        density_fn = MagicMock(return_value=1.0e12)

        assert BendingAngleSolver(density_fn).solve(None, epoch_2024, 2.295e9) == 0.0
        density_fn.assert_not_called()

    def test_uniform_density_does_not_bend(self, station_equator, spacecraft_oblique, body_radius, epoch_2024):
        """With no index gradient there is nothing to refract."""
        from iono_correction.physics.bending_angle import BendingAngleSolver
        from iono_correction.physics.shell_geometry import intersect_shell

        segment = intersect_shell(station_equator, spacecraft_oblique, body_radius)
        solver = BendingAngleSolver(lambda pos, epoch: 1.0e12)

        assert solver.solve(segment, epoch_2024, 2.295e9) == 0.0

    def test_walk_starts_at_segment_end(self, station_equator, spacecraft_oblique, body_radius, epoch_2024):
        """The trace runs from the spacecraft-side end toward the station."""
        from iono_correction.physics.bending_angle import BendingAngleSolver
        from iono_correction.physics.shell_geometry import intersect_shell

        segment = intersect_shell(station_equator, spacecraft_oblique, body_radius)
        density_fn = MagicMock(return_value=1.0e11)
        BendingAngleSolver(density_fn, num_intervals=10).solve(segment, epoch_2024, 2.295e9)

        points = [call[0][0] for call in density_fn.call_args_list]
        assert len(points) == 11
        np.testing.assert_allclose(points[0], segment.end)
        np.testing.assert_allclose(points[-1], segment.start, atol=1e-6)

    def test_layer_bends_oblique_ray(self, station_equator, spacecraft_oblique, body_radius,
                                     chapman_density, epoch_2024):
        """A peaked layer on an oblique path gives a positive elevation correction."""
        from iono_correction.physics.bending_angle import BendingAngleSolver
        from iono_correction.physics.shell_geometry import intersect_shell

        solver = BendingAngleSolver(chapman_density)
        forward = solver.solve(
            intersect_shell(station_equator, spacecraft_oblique, body_radius), epoch_2024, 2.295e9)
        backward = solver.solve(
            intersect_shell(spacecraft_oblique, station_equator, body_radius), epoch_2024, 2.295e9)

        assert forward > 0.0
        assert math.isfinite(forward)
        # Reversing the walk agrees to first order
        assert backward > 0.0
        assert backward == pytest.approx(forward, rel=0.1)

    def test_critical_density_is_not_an_error(self, station_equator, spacecraft_overhead,
                                              body_radius, epoch_2024):
        """n = 0 at the plasma frequency gives a non-finite angle, not an exception."""
        from iono_correction.physics.bending_angle import BendingAngleSolver, refractive_index
        from iono_correction.physics.shell_geometry import intersect_shell

        freq = 2.0e6
        critical = freq * freq / 40.3
        assert refractive_index(critical, freq) == 0.0

        segment = intersect_shell(station_equator, spacecraft_overhead, body_radius)
        result = BendingAngleSolver(lambda pos, epoch: critical).solve(segment, epoch_2024, freq)

        assert not math.isfinite(result)

    def test_path_through_body_centre_gives_nan(self, epoch_2024):
        """A sample node on the origin has no incidence angle."""
        from iono_correction.physics.bending_angle import BendingAngleSolver
        from iono_correction.physics.shell_geometry import intersect_shell

        segment = intersect_shell([-1000.0, 0.0, 0.0], [3000.0, 0.0, 0.0], 1000.0)
        assert segment.length_km == 4000.0

        result = BendingAngleSolver(lambda pos, epoch: 1.0e11).solve(segment, epoch_2024, 2.295e9)

        assert math.isnan(result)

    def test_lower_frequency_bends_more(self, station_equator, spacecraft_oblique, body_radius,
                                        chapman_density, epoch_2024):
        from iono_correction.physics.bending_angle import BendingAngleSolver
        from iono_correction.physics.shell_geometry import intersect_shell

        segment = intersect_shell(station_equator, spacecraft_oblique, body_radius)
        solver = BendingAngleSolver(chapman_density)

        assert solver.solve(segment, epoch_2024, 1.0e9) > solver.solve(segment, epoch_2024, 8.4e9)


class TestDensityAdapter:
    """Test the provider adapter."""

    def test_passes_altitude_and_calendar_fields(self, station_equator):
        from iono_correction.epoch import modified_julian_date
        from iono_correction.physics.electron_density import DensityAdapter

        provider = MagicMock()
        provider.density.return_value = 5.0e11
        adapter = DensityAdapter(provider)

        epoch = modified_julian_date(2024, 3, 15, 12, 30)
        value = adapter(station_equator + np.array([350.0, 0.0, 0.0]), epoch)

        assert value == 5.0e11
        provider.initialize.assert_called_once()
        position, altitude, year, month_day, hour = provider.density.call_args[0]
        assert altitude == pytest.approx(350.0)
        assert year == 2024
        assert month_day == 315
        assert hour == pytest.approx(12.5)

    def test_negative_density_is_clamped(self, station_equator, epoch_2024):
        from iono_correction.physics.electron_density import DensityAdapter

        provider = MagicMock()
        provider.density.return_value = -3.0e10
        adapter = DensityAdapter(provider)

        assert adapter(station_equator, epoch_2024) == 0.0
        assert adapter.get_stats() == {'density_calls': 1, 'negative_clamped': 1}

    def test_initialize_runs_once(self):
        from iono_correction.physics.electron_density import DensityAdapter

        provider = MagicMock()
        adapter = DensityAdapter(provider)
        adapter.initialize()
        adapter.initialize()

        provider.initialize.assert_called_once()

    def test_constant_provider(self):
        from iono_correction.physics.electron_density import ConstantDensityProvider

        provider = ConstantDensityProvider(2.5e11)
        provider.initialize()

        assert provider.density(np.zeros(3), 300.0, 2024, 315, 12.0) == 2.5e11


class TestIRI2016DensityProvider:
    """Test the iri2016 wrapper without the Fortran model."""

    def test_missing_package_raises(self, monkeypatch):
        import sys
        from iono_correction.errors import DataUnavailableError
        from iono_correction.physics.electron_density import IRI2016DensityProvider

        monkeypatch.setitem(sys.modules, 'iri2016', None)

        with pytest.raises(DataUnavailableError):
            IRI2016DensityProvider().initialize()

    def test_density_before_initialize_raises(self):
        from iono_correction.errors import DataUnavailableError
        from iono_correction.physics.electron_density import IRI2016DensityProvider

        with pytest.raises(DataUnavailableError):
            IRI2016DensityProvider().density(np.array([6378.1363, 0.0, 0.0]), 0.0, 2024, 315, 12.0)

    def test_calls_iri_with_geographic_point(self, monkeypatch):
        import sys
        import types
        from datetime import datetime, timezone
        from iono_correction.physics.electron_density import IRI2016DensityProvider

        calls = []

        def fake_iri(when, altkmrange, glat, glon):
            calls.append((when, altkmrange, glat, glon))
            return {'ne': types.SimpleNamespace(values=np.array([1.5e11, 1.4e11]))}

        monkeypatch.setitem(sys.modules, 'iri2016', types.SimpleNamespace(IRI=fake_iri))

        provider = IRI2016DensityProvider()
        provider.initialize()
        value = provider.density(np.array([6378.1363 + 300.0, 0.0, 0.0]), 300.0, 2024, 315, 12.5)

        assert value == 1.5e11
        when, altkmrange, glat, glon = calls[0]
        assert when == datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)
        assert altkmrange == (300.0, 301.0, 1.0)
        assert glat == pytest.approx(0.0, abs=1e-9)
        assert glon == pytest.approx(0.0, abs=1e-9)

    def test_model_failure_becomes_data_unavailable(self, monkeypatch):
        import sys
        import types
        from iono_correction.errors import DataUnavailableError
        from iono_correction.physics.electron_density import IRI2016DensityProvider

        def broken_iri(*args):
            raise FileNotFoundError("ig_rz.dat")

        monkeypatch.setitem(sys.modules, 'iri2016', types.SimpleNamespace(IRI=broken_iri))

        provider = IRI2016DensityProvider()
        provider.initialize()
        with pytest.raises(DataUnavailableError, match="Ionosphere data files not found"):
            provider.density(np.array([6678.0, 0.0, 0.0]), 300.0, 2024, 315, 12.0)
