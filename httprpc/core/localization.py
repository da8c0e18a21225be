"""Localization Boundary — keyed text bundles and locale negotiation.

Invariants:
    - A missing bundle or a missing key is a miss (None), never an error
    - Locale tags are normalized to "lang" or "lang-REGION" ("pt_br" → "pt-BR")
    - locale_candidates() yields most specific first, ending with "" (base bundle)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Negotiation is pure string work so the transport adapter stays thin
"""

from collections.abc import Iterator, Mapping
from typing import Protocol


class TextBundle(Protocol):
    """Localized text lookup for one contract and locale."""
    def get(self, key: str) -> str | None: ...


class BundleSource(Protocol):
    """Resolves the bundle for a contract in a given locale."""
    def get_bundle(self, contract: type, locale: str) -> TextBundle | None: ...


def normalize_locale(tag: str) -> str:
    """Normalize "EN_us" / "en-us" to "en-US"."""
    parts = [p for p in tag.strip().replace("_", "-").split("-") if p]
    if not parts:
        return ""
    language = parts[0].lower()
    if len(parts) == 1:
        return language
    return f"{language}-{parts[1].upper()}"


def locale_candidates(locale: str) -> Iterator[str]:
    """Fallback chain: "pt-BR" → "pt-BR", "pt", ""."""
    normalized = normalize_locale(locale)
    if "-" in normalized:
        yield normalized
    if normalized:
        yield normalized.split("-")[0]
    yield ""


def negotiate_locale(accept_language: str | None, default: str) -> str:
    """Pick the preferred locale from an Accept-Language header.

    Highest q-value wins; ties keep header order. "*" and malformed
    entries are skipped.
    """
    if not accept_language:
        return normalize_locale(default)
    ranked: list[tuple[float, int, str]] = []
    for index, entry in enumerate(accept_language.split(",")):
        tag, _, params = entry.strip().partition(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                continue
        if quality <= 0:
            continue
        ranked.append((-quality, index, tag))
    if not ranked:
        return normalize_locale(default)
    ranked.sort()
    return normalize_locale(ranked[0][2])


class MappingBundle:
    """Bundle backed by a plain dict."""

    def __init__(self, entries: Mapping[str, str]):
        self._entries = dict(entries)

    def get(self, key: str) -> str | None:
        return self._entries.get(key)


class MappingBundleSource:
    """In-memory bundles: {contract name: {locale tag: {key: text}}}.

    Entries for less specific locales are overlaid by more specific ones,
    so a "pt-BR" request sees "pt-BR" keys, then "pt" keys, then base keys.
    """

    def __init__(self, bundles: Mapping[str, Mapping[str, Mapping[str, str]]]):
        self._bundles = {
            contract: {normalize_locale(tag): dict(entries) for tag, entries in by_locale.items()}
            for contract, by_locale in bundles.items()
        }

    def get_bundle(self, contract: type, locale: str) -> TextBundle | None:
        by_locale = self._bundles.get(contract.__name__)
        if by_locale is None:
            return None
        merged: dict[str, str] = {}
        found = False
        for candidate in reversed(list(locale_candidates(locale))):
            entries = by_locale.get(candidate)
            if entries is not None:
                merged.update(entries)
                found = True
        return MappingBundle(merged) if found else None
