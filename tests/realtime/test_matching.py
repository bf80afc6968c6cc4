# tests/realtime/test_matching.py
"""Tests for the channel and geofence matching rule."""

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest

from groupdeedo.realtime.matching import matches, normalize_channel
from groupdeedo.schemas.post import PostOut
from groupdeedo.utils.location import haversine_miles


@dataclass
class Viewer:
    channel: str = ""
    latitude: float | None = None
    longitude: float | None = None
    radius_miles: float = 10.0


def make_post(channel: str = "", latitude: float = 0.0, longitude: float = 0.0) -> PostOut:
    return PostOut(
        id="p1",
        session_id="s1",
        display_name="Anonymous",
        message="hello",
        channel=channel,
        latitude=latitude,
        longitude=longitude,
        timestamp=datetime(2026, 1, 1, tzinfo=UTC),
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ""),
        ("", ""),
        ("   ", ""),
        ("Alpha ", "alpha"),
        ("MUSIC", "music"),
        (42, "42"),
    ],
)
def test_normalize_channel(raw, expected) -> None:
    assert normalize_channel(raw) == expected


def test_same_channel_matches_without_geofence() -> None:
    assert matches(Viewer(channel="alpha"), make_post("alpha"), geofence=False)


def test_channel_comparison_is_case_and_whitespace_insensitive() -> None:
    assert matches(Viewer(channel="Alpha "), make_post("alpha"), geofence=False)


def test_public_channel_is_its_own_room() -> None:
    assert matches(Viewer(channel=""), make_post(""), geofence=False)
    assert not matches(Viewer(channel=""), make_post("alpha"), geofence=False)
    assert not matches(Viewer(channel="alpha"), make_post(""), geofence=False)


def test_location_is_ignored_when_geofence_is_off() -> None:
    viewer = Viewer(channel="x", latitude=10.0, longitude=10.0, radius_miles=1)
    assert matches(viewer, make_post("x", -40.0, 120.0), geofence=False)


def test_geofence_requires_participant_location() -> None:
    assert not matches(Viewer(channel="x"), make_post("x", 40.0, -74.0), geofence=True)


def test_geofence_accepts_post_inside_radius() -> None:
    # Half a degree of latitude is roughly 34.5 miles.
    viewer = Viewer(channel="x", latitude=40.0, longitude=-74.0, radius_miles=35)
    assert matches(viewer, make_post("x", 40.5, -74.0), geofence=True)


def test_geofence_rejects_post_outside_radius() -> None:
    viewer = Viewer(channel="x", latitude=40.0, longitude=-74.0, radius_miles=10)
    assert not matches(viewer, make_post("x", 40.5, -74.0), geofence=True)


def test_geofence_boundary_is_inclusive() -> None:
    radius = haversine_miles(0.0, 0.0, 1.0, 0.0)
    viewer = Viewer(channel="x", latitude=0.0, longitude=0.0, radius_miles=radius)
    assert matches(viewer, make_post("x", 1.0, 0.0), geofence=True)


def test_geofence_still_requires_channel_match() -> None:
    viewer = Viewer(channel="x", latitude=40.0, longitude=-74.0, radius_miles=100)
    assert not matches(viewer, make_post("y", 40.0, -74.0), geofence=True)


def test_one_degree_is_outside_ten_miles() -> None:
    viewer = Viewer(channel="", latitude=0.0, longitude=0.0, radius_miles=10)
    assert not matches(viewer, make_post("", 1.0, 0.0), geofence=True)


def test_half_degree_is_inside_a_hundred_miles() -> None:
    viewer = Viewer(channel="", latitude=0.0, longitude=0.0, radius_miles=100)
    assert matches(viewer, make_post("", 0.0, 0.5), geofence=True)


def test_matching_is_deterministic() -> None:
    viewer = Viewer(channel=" general ")
    post = make_post("general")
    assert [matches(viewer, post, geofence=False) for _ in range(3)] == [True, True, True]
