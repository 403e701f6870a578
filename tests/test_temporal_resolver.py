"""Tests pour le résolveur d'entrées temporelles.

Ce module teste la classification profil/date, la résolution depuis un profil (fuseaux IANA,
profils hérités, validations) et depuis des arguments bruts (coordonnées, "now", UTC).
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from halcon.domain.entities import BirthProfile, ResolveOptions
from halcon.domain.errors import ResolutionFailure, ResolveErrorKind, TemporalInputError
from halcon.domain.temporal_resolver import (
    TemporalInputResolver,
    is_profile_name,
    validate_profile_fields,
)
from halcon.infra.repositories import InMemoryProfileRepo


def _resolver_with(**fields) -> TemporalInputResolver:
    data = {
        "name": "subject",
        "date": "1990-03-10",
        "time": "12:00:00",
        "latitude": 0.0,
        "longitude": 0.0,
        "location": "Somewhere",
    }
    data.update(fields)
    return TemporalInputResolver(InMemoryProfileRepo([BirthProfile(**data)]))


def _kind(resolver: TemporalInputResolver, **options) -> ResolveErrorKind:
    with pytest.raises(TemporalInputError) as exc:
        resolver.resolve(ResolveOptions(**options))
    return exc.value.kind


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("manu", True),
        ("MANU", True),
        ("profile_1", True),
        ("jean-luc", True),
        ("2024", True),  # aucun tiret: lu comme un nom
        ("run-2024", True),
        ("now", False),
        ("", False),
        ("2024-01-01", False),
        ("2024-01", False),
        ("run-2024-01", False),  # contient chiffres-tiret-chiffres: lu comme une date
        ("my profile", False),
        ("1990/03/10", False),
        ("2024-01-01T10:00", False),
        ("manu\n", False),
        ("٢٠٢٤-٠١", False),  # chiffres non ASCII: ni date, ni nom
    ],
)
def test_is_profile_name(token: str, expected: bool) -> None:
    """Teste l'heuristique de classification, ambiguïtés comprises."""
    assert is_profile_name(token) is expected


def test_resolve_profile_with_timezone(resolver) -> None:
    """1990-03-10 12:55 Asia/Kolkata -> 07:25 UTC."""
    result = resolver.resolve(ResolveOptions(date_or_name="manu"))
    assert result.instant == datetime(1990, 3, 10, 7, 25, tzinfo=UTC)
    assert result.profile_name == "manu"
    assert result.timezone == "Asia/Kolkata"
    assert result.utc_offset == "+05:30"
    assert result.has_timezone_warning is False
    assert result.location.label == "Kurnool, India"
    assert result.location.latitude == 15.83


def test_resolve_profile_is_case_insensitive(resolver) -> None:
    result = resolver.resolve(ResolveOptions(date_or_name="Manu", time="00:00:00"))
    assert result.profile_name == "manu"


def test_resolve_legacy_profile_treated_as_utc(resolver) -> None:
    result = resolver.resolve(ResolveOptions(date_or_name="legacy"))
    assert result.instant == datetime(1985, 6, 21, 9, 15, tzinfo=UTC)
    assert result.has_timezone_warning is True
    assert result.timezone is None


def test_profile_not_found_lists_available_profiles() -> None:
    repo = InMemoryProfileRepo(
        [
            BirthProfile(
                name="manu",
                date="1990-03-10",
                time="12:55:00",
                timezone="Asia/Kolkata",
                latitude=15.83,
                longitude=78.04,
                location="Kurnool, India",
            )
        ]
    )
    with pytest.raises(TemporalInputError) as exc:
        TemporalInputResolver(repo).resolve(ResolveOptions(date_or_name="nonexistent"))
    assert exc.value.kind is ResolveErrorKind.PROFILE_NOT_FOUND
    assert exc.value.available_profiles == [{"name": "manu", "location": "Kurnool, India"}]
    assert "nonexistent" in str(exc.value)


def test_profile_not_found_with_empty_repository() -> None:
    outcome = TemporalInputResolver(InMemoryProfileRepo()).try_resolve(
        ResolveOptions(date_or_name="ghost")
    )
    assert isinstance(outcome, ResolutionFailure)
    assert outcome.available_profiles == ()


@pytest.mark.parametrize(
    ("fields", "kind"),
    [
        ({"date": "1990/03/10"}, ResolveErrorKind.INVALID_DATE_FORMAT),
        ({"date": "90-03-10"}, ResolveErrorKind.INVALID_DATE_FORMAT),
        ({"time": "12:55"}, ResolveErrorKind.INVALID_TIME_FORMAT),
        ({"time": "1:05:00"}, ResolveErrorKind.INVALID_TIME_FORMAT),
        ({"date": "1990-03-10\n"}, ResolveErrorKind.INVALID_DATE_FORMAT),
        ({"date": "١٩٩٠-٠٣-١٠"}, ResolveErrorKind.INVALID_DATE_FORMAT),
        ({"time": "12:00:00\n"}, ResolveErrorKind.INVALID_TIME_FORMAT),
        ({"time": "١٢:٠٠:٠٠"}, ResolveErrorKind.INVALID_TIME_FORMAT),
        ({"latitude": 95.0}, ResolveErrorKind.INVALID_COORDINATES),
        ({"latitude": -90.5}, ResolveErrorKind.INVALID_COORDINATES),
        ({"longitude": 181.0}, ResolveErrorKind.INVALID_COORDINATES),
        ({"longitude": float("nan")}, ResolveErrorKind.INVALID_COORDINATES),
        ({"timezone": "Mars/Olympus_Mons"}, ResolveErrorKind.INVALID_DATETIME),
        ({"timezone": "America"}, ResolveErrorKind.INVALID_DATETIME),
        ({"date": "1990-02-30", "timezone": "Europe/Paris"}, ResolveErrorKind.INVALID_DATETIME),
        ({"date": "1990-02-30"}, ResolveErrorKind.INVALID_DATETIME),
        ({"time": "25:00:00"}, ResolveErrorKind.INVALID_DATETIME),
    ],
)
def test_invalid_profile_fields(fields, kind) -> None:
    """Teste que chaque champ invalide d'un profil produit la catégorie attendue."""
    assert _kind(_resolver_with(**fields), date_or_name="subject") is kind


def test_coordinate_bounds_are_inclusive() -> None:
    resolver = _resolver_with(latitude=-90.0, longitude=180.0)
    result = resolver.resolve(ResolveOptions(date_or_name="subject"))
    assert result.location.latitude == -90.0
    assert validate_profile_fields(_profile(latitude=90.0, longitude=-180.0)) is None


def _profile(**fields) -> BirthProfile:
    data = {"name": "p", "date": "2000-01-01", "time": "00:00:00", "latitude": 0, "longitude": 0}
    data.update(fields)
    return BirthProfile(**data)


@pytest.mark.parametrize(
    ("date", "time", "tz", "expected"),
    [
        # heure d'été de Chicago (CDT, UTC-5)
        ("1985-06-21", "09:15:00", "America/Chicago", datetime(1985, 6, 21, 14, 15, tzinfo=UTC)),
        # hémisphère sud: été austral (AEDT, UTC+11) puis hiver (AEST, UTC+10)
        ("2020-01-15", "10:00:00", "Australia/Sydney", datetime(2020, 1, 14, 23, 0, tzinfo=UTC)),
        ("2020-07-15", "10:00:00", "Australia/Sydney", datetime(2020, 7, 15, 0, 0, tzinfo=UTC)),
        # règle historique: avant 2007, l'heure d'été américaine commençait en avril
        ("2006-03-20", "12:00:00", "America/New_York", datetime(2006, 3, 20, 17, 0, tzinfo=UTC)),
        ("2007-03-20", "12:00:00", "America/New_York", datetime(2007, 3, 20, 16, 0, tzinfo=UTC)),
        # British Standard Time (UTC+1 toute l'année, 1968-1971)
        ("1970-01-15", "12:00:00", "Europe/London", datetime(1970, 1, 15, 11, 0, tzinfo=UTC)),
        # heure ambiguë au retour à l'heure d'hiver: première occurrence (EDT)
        ("2021-11-07", "01:30:00", "America/New_York", datetime(2021, 11, 7, 5, 30, tzinfo=UTC)),
    ],
)
def test_profile_timezone_uses_historical_rules(date, time, tz, expected) -> None:
    resolver = _resolver_with(date=date, time=time, timezone=tz)
    assert resolver.resolve(ResolveOptions(date_or_name="subject")).instant == expected


def test_profile_nonexistent_local_time_is_invalid() -> None:
    """02:30 n'existe pas à New York le 14 mars 2021 (passage à l'heure d'été)."""
    resolver = _resolver_with(date="2021-03-14", time="02:30:00", timezone="America/New_York")
    assert _kind(resolver, date_or_name="subject") is ResolveErrorKind.INVALID_DATETIME


def test_resolve_literal_arguments_as_utc(resolver) -> None:
    result = resolver.resolve(
        ResolveOptions(
            date_or_name="1990-03-10",
            time="12:55:00",
            latitude="15.83",
            longitude="78.04",
            location="Hyderabad, India",
        )
    )
    assert result.instant == datetime(1990, 3, 10, 12, 55, tzinfo=UTC)
    assert result.location.latitude == 15.83
    assert result.location.longitude == 78.04
    assert result.location.label == "Hyderabad, India"
    assert result.profile_name is None
    assert result.timezone is None
    assert result.has_timezone_warning is False


def test_resolve_literal_default_location_label(resolver) -> None:
    result = resolver.resolve(
        ResolveOptions(date_or_name="2000-01-01", time="06:30", latitude=0, longitude=0)
    )
    assert result.location.label == "Unknown"
    assert result.location.latitude == 0.0
    assert result.instant == datetime(2000, 1, 1, 6, 30, tzinfo=UTC)


def test_resolve_now_uses_clock(resolver, fixed_now) -> None:
    result = resolver.resolve(
        ResolveOptions(date_or_name="now", latitude="48.85", longitude="2.35")
    )
    assert result.instant == fixed_now


@pytest.mark.parametrize(
    ("options", "kind"),
    [
        ({"latitude": None, "longitude": "2.35"}, ResolveErrorKind.MISSING_COORDINATES),
        ({"latitude": "48.85"}, ResolveErrorKind.MISSING_COORDINATES),
        ({"latitude": "", "longitude": ""}, ResolveErrorKind.MISSING_COORDINATES),
        ({"latitude": "north", "longitude": "2.35"}, ResolveErrorKind.INVALID_COORDINATES),
        ({"latitude": "nan", "longitude": "2.35"}, ResolveErrorKind.INVALID_COORDINATES),
        ({"latitude": "91", "longitude": "2.35"}, ResolveErrorKind.INVALID_COORDINATES),
        ({"latitude": "48.85", "longitude": "-180.01"}, ResolveErrorKind.INVALID_COORDINATES),
    ],
)
def test_literal_coordinate_errors(resolver, options, kind) -> None:
    base = {"date_or_name": "2000-01-01", "time": "00:00:00"}
    assert _kind(resolver, **base, **options) is kind


@pytest.mark.parametrize(
    ("date", "time"),
    [
        ("2000-13-01", "00:00:00"),
        ("2000-01-01", "24:61:00"),
        ("2000-01-01", ""),
        ("2000-01-01", "10:00:00+02:00"),
        ("2000-01", "10:00:00"),
    ],
)
def test_literal_malformed_datetime(resolver, date, time) -> None:
    kind = _kind(resolver, date_or_name=date, time=time, latitude="1", longitude="1")
    assert kind is ResolveErrorKind.INVALID_DATETIME


def test_literal_coordinates_checked_before_datetime(resolver) -> None:
    assert (
        _kind(resolver, date_or_name="garbage date", time="x")
        is ResolveErrorKind.MISSING_COORDINATES
    )


def test_try_resolve_returns_closed_variants(resolver) -> None:
    """Teste que les appelants peuvent filtrer le résultat par motif."""
    outcomes = [
        resolver.try_resolve(ResolveOptions(date_or_name="manu")),
        resolver.try_resolve(ResolveOptions(date_or_name="2000-01-01", time="00:00:00")),
    ]
    labels = []
    for outcome in outcomes:
        match outcome:
            case ResolutionFailure(kind=ResolveErrorKind.MISSING_COORDINATES):
                labels.append("missing")
            case ResolutionFailure():
                labels.append("other-failure")
            case _:
                labels.append(outcome.profile_name)
    assert labels == ["manu", "missing"]


def test_resolution_reads_repository_each_time(profile_repo, resolver) -> None:
    resolver.resolve(ResolveOptions(date_or_name="manu"))
    profile_repo.delete("manu")
    outcome = resolver.try_resolve(ResolveOptions(date_or_name="manu"))
    assert isinstance(outcome, ResolutionFailure)
    assert outcome.kind is ResolveErrorKind.PROFILE_NOT_FOUND
    assert [p.name for p in outcome.available_profiles] == ["legacy"]
