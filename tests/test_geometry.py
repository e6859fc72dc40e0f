"""Tests for geometry module - tank volume calculations."""

from __future__ import annotations

import math

import pytest

from custom_components.tank_level_monitor.geometry import (
    GeometryError,
    cylinder_volume_liters,
    full_volume_liters,
    linear_volume_liters,
    rectangular_volume_liters,
    volume_for_depth,
)
from custom_components.tank_level_monitor.models import (
    LevelModel,
    TankGeometry,
    TankShape,
)
from conftest import make_cylinder

FULL_2X5 = math.pi * 1.0**2 * 5.0 * 1000.0


# ---------------------------------------------------------------------------
# Horizontal cylinder
# ---------------------------------------------------------------------------

class TestCylinderVolume:
    """Tests for the partially-filled horizontal cylinder."""

    def test_empty_tank(self):
        """Zero depth should return 0."""
        assert cylinder_volume_liters(2.0, 5.0, 0.0) == 0.0

    def test_full_tank(self):
        """Depth equal to the diameter should return the full cylinder."""
        assert cylinder_volume_liters(2.0, 5.0, 2.0) == pytest.approx(FULL_2X5)

    def test_half_full(self):
        """Half the diameter: segment area is R^2 * acos(0) = pi/2."""
        volume = cylinder_volume_liters(2.0, 5.0, 1.0)
        assert volume == pytest.approx(5.0 * math.pi / 2 * 1000.0)
        assert round(volume, 1) == 7854.0

    def test_depth_above_diameter_is_full(self):
        """Depth above the diameter should cap at the full volume."""
        assert cylinder_volume_liters(2.0, 5.0, 3.5) == pytest.approx(FULL_2X5)

    def test_negative_depth_returns_zero(self):
        """Negative depth should degrade to 0."""
        assert cylinder_volume_liters(2.0, 5.0, -0.3) == 0.0

    def test_volume_within_bounds(self):
        """Every depth in [0, D] stays between empty and full."""
        for step in range(0, 21):
            volume = cylinder_volume_liters(2.0, 5.0, step / 10)
            assert 0.0 <= volume <= FULL_2X5 + 1e-6

    def test_volume_monotonic_in_depth(self):
        """Volume should never decrease as depth increases."""
        prev = 0.0
        for step in range(0, 41):
            volume = cylinder_volume_liters(1.24, 1.8, step * 1.24 / 40)
            assert volume >= prev
            prev = volume

    def test_quarter_fill_below_quarter_volume(self):
        """A quarter of the diameter holds less than a quarter of the volume."""
        volume = cylinder_volume_liters(2.0, 5.0, 0.5)
        assert 0 < volume < FULL_2X5 / 4

    @pytest.mark.parametrize(
        ("diameter", "length"),
        [(0.0, 5.0), (-1.0, 5.0), (2.0, 0.0), (2.0, -5.0)],
    )
    def test_degenerate_dimensions_return_zero(self, diameter, length):
        """Non-positive diameter or length returns 0 whatever the depth."""
        assert cylinder_volume_liters(diameter, length, 1.0) == 0.0

    @pytest.mark.parametrize(
        ("diameter", "length", "depth"),
        [
            (float("nan"), 5.0, 1.0),
            (2.0, float("inf"), 1.0),
            (2.0, 5.0, float("nan")),
            (-float("inf"), 5.0, 1.0),
        ],
    )
    def test_non_finite_input_raises(self, diameter, length, depth):
        """NaN and infinity are data-integrity errors."""
        with pytest.raises(GeometryError):
            cylinder_volume_liters(diameter, length, depth)


# ---------------------------------------------------------------------------
# Rectangular prism
# ---------------------------------------------------------------------------

class TestRectangularVolume:
    """Tests for rectangular tanks."""

    def test_full_fire_tank(self):
        """8.9 x 5.15 x 17.9 m holds about 820446.5 L."""
        volume = rectangular_volume_liters(8.9, 5.15, 17.9)
        assert volume == pytest.approx(820446.5, abs=0.01)

    @pytest.mark.parametrize(
        ("width", "length", "depth"),
        [(1.0, 1.0, 1.0), (2.5, 4.0, 0.3), (8.9, 5.15, 3.2)],
    )
    def test_formula(self, width, length, depth):
        """Volume is width * length * depth * 1000."""
        assert rectangular_volume_liters(width, length, depth) == pytest.approx(
            width * length * depth * 1000
        )

    def test_zero_depth(self):
        assert rectangular_volume_liters(8.9, 5.15, 0.0) == 0.0

    def test_degenerate_dimensions_return_zero(self):
        assert rectangular_volume_liters(0.0, 5.15, 2.0) == 0.0
        assert rectangular_volume_liters(8.9, -1.0, 2.0) == 0.0

    def test_non_finite_input_raises(self):
        with pytest.raises(GeometryError):
            rectangular_volume_liters(8.9, 5.15, float("inf"))


# ---------------------------------------------------------------------------
# Linear height-ratio model
# ---------------------------------------------------------------------------

class TestLinearVolume:
    """Tests for the linear level model."""

    def test_proportional_to_depth(self):
        assert linear_volume_liters(10000.0, 2.0, 0.5) == pytest.approx(2500.0)

    def test_capped_at_capacity(self):
        assert linear_volume_liters(10000.0, 2.0, 3.0) == pytest.approx(10000.0)

    def test_zero_capacity_returns_zero(self):
        assert linear_volume_liters(0.0, 2.0, 1.0) == 0.0

    def test_non_finite_capacity_raises(self):
        with pytest.raises(GeometryError):
            linear_volume_liters(float("nan"), 2.0, 1.0)


# ---------------------------------------------------------------------------
# Dispatch on configured shape and model
# ---------------------------------------------------------------------------

class TestVolumeForDepth:
    """Tests for the shape/model dispatcher."""

    def test_cylinder_dispatch(self, cylinder_geometry):
        assert volume_for_depth(cylinder_geometry, 1.0) == pytest.approx(
            cylinder_volume_liters(2.0, 5.0, 1.0)
        )

    def test_rectangular_dispatch_clamps_to_height(self, fire_tank_geometry):
        """Depth above the tank height counts as a full tank."""
        assert volume_for_depth(fire_tank_geometry, 25.0) == pytest.approx(
            volume_for_depth(fire_tank_geometry, 17.9)
        )

    def test_linear_model(self):
        geometry = make_cylinder(level_model=LevelModel.LINEAR, capacity_l=10000.0)
        assert volume_for_depth(geometry, 0.5) == pytest.approx(2500.0)

    def test_linear_model_without_capacity(self):
        geometry = make_cylinder(level_model=LevelModel.LINEAR, capacity_l=None)
        assert volume_for_depth(geometry, 0.5) is None

    def test_unknown_shape_returns_none(self):
        assert volume_for_depth(TankGeometry(shape=None), 1.0) is None

    def test_missing_dimension_returns_none(self):
        geometry = TankGeometry(shape=TankShape.RECTANGULAR, length_m=2.0)
        assert volume_for_depth(geometry, 1.0) is None

    def test_full_volume(self, cylinder_geometry, fire_tank_geometry):
        assert full_volume_liters(cylinder_geometry) == pytest.approx(FULL_2X5)
        assert full_volume_liters(fire_tank_geometry) == pytest.approx(
            820446.5, abs=0.01
        )
        assert full_volume_liters(TankGeometry(shape=None)) is None
