"""Localization — locale normalization, negotiation, and in-memory bundles."""

import pytest

from httprpc.core.localization import (
    MappingBundleSource, locale_candidates, negotiate_locale, normalize_locale,
)


class Greeter:
    pass


@pytest.mark.parametrize("tag, expected", [
    ("en", "en"),
    ("EN", "en"),
    ("pt_br", "pt-BR"),
    ("pt-br", "pt-BR"),
    ("", ""),
])
def test_normalize_locale(tag, expected):
    assert normalize_locale(tag) == expected


def test_candidates_most_specific_first():
    assert list(locale_candidates("pt-BR")) == ["pt-BR", "pt", ""]
    assert list(locale_candidates("fr")) == ["fr", ""]
    assert list(locale_candidates("")) == [""]


@pytest.mark.parametrize("header, expected", [
    (None, "en"),
    ("", "en"),
    ("fr-CA,fr;q=0.8,en;q=0.5", "fr-CA"),
    ("en;q=0.4, de;q=0.9", "de"),
    ("da, en-GB;q=0.8", "da"),
    ("*", "en"),
    ("fr;q=0, es", "es"),
    ("es;q=abc, it", "it"),
])
def test_negotiate_locale(header, expected):
    assert negotiate_locale(header, "en") == expected


def test_bundle_overlays_specific_over_generic():
    source = MappingBundleSource({
        "Greeter": {
            "": {"hello": "Hello", "bye": "Bye"},
            "pt": {"hello": "Olá"},
            "pt_BR": {"bye": "Tchau"},
        },
    })
    bundle = source.get_bundle(Greeter, "pt-BR")
    assert bundle.get("hello") == "Olá"
    assert bundle.get("bye") == "Tchau"
    assert bundle.get("missing") is None


def test_bundle_falls_back_to_base():
    source = MappingBundleSource({"Greeter": {"": {"hello": "Hello"}}})
    assert source.get_bundle(Greeter, "ja").get("hello") == "Hello"


def test_missing_bundle_is_none():
    source = MappingBundleSource({"Greeter": {"fr": {"hello": "Bonjour"}}})
    assert source.get_bundle(Greeter, "de") is None
    assert source.get_bundle(object, "fr") is None
