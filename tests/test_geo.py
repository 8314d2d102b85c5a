from __future__ import annotations

import pytest

from voyage.core.geo import distance_km, interpolate
from voyage.schemas import Coordinate

DELHI = Coordinate(latitude=28.6139, longitude=77.2090)
AGRA = Coordinate(latitude=27.1767, longitude=78.0081)


def test_distance_is_symmetric() -> None:
    assert distance_km(DELHI, AGRA) == pytest.approx(distance_km(AGRA, DELHI))


def test_distance_to_self_is_zero() -> None:
    assert distance_km(DELHI, DELHI) == 0


def test_delhi_to_agra_great_circle() -> None:
    assert distance_km(DELHI, AGRA) == pytest.approx(178, abs=3)


def test_one_degree_of_latitude() -> None:
    a = Coordinate(latitude=0.0, longitude=0.0)
    b = Coordinate(latitude=1.0, longitude=0.0)

    assert distance_km(a, b) == pytest.approx(111.19, abs=0.05)


def test_antipodal_points_do_not_raise() -> None:
    a = Coordinate(latitude=0.0, longitude=0.0)
    b = Coordinate(latitude=0.0, longitude=180.0)

    assert distance_km(a, b) == pytest.approx(20015, abs=5)


def test_interpolate_blends_each_axis_linearly() -> None:
    a = Coordinate(latitude=10.0, longitude=20.0)
    b = Coordinate(latitude=20.0, longitude=40.0)

    midpoint = interpolate(a, b, 0.25)

    assert midpoint.latitude == pytest.approx(12.5)
    assert midpoint.longitude == pytest.approx(25.0)


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.5, 1.5])
def test_interpolate_rejects_fractions_outside_open_interval(fraction: float) -> None:
    with pytest.raises(ValueError):
        interpolate(DELHI, AGRA, fraction)
