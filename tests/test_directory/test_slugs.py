"""
Tests for realm_directory.directory.slugs — realm name normalization.

Covers:
  - Known realm names → Blizzard slugs
  - Diacritic stripping
  - Idempotence over a broad set of inputs
  - is_canonical_slug()
"""

from __future__ import annotations

import random
import string

import pytest

from realm_directory.directory.slugs import is_canonical_slug, normalize_realm_slug


class TestNormalizeRealmSlug:
    def test_spaces_become_hyphens(self):
        assert normalize_realm_slug("Twisting Nether") == "twisting-nether"

    def test_diacritics_stripped(self):
        assert normalize_realm_slug("Área-52") == "area52"

    def test_diacritics_stripped_with_space(self):
        assert normalize_realm_slug("Área 52") == "area-52"

    def test_apostrophe_removed(self):
        assert normalize_realm_slug("Mal'Ganis") == "malganis"

    def test_typographic_apostrophe_removed(self):
        assert normalize_realm_slug("Kael’thas") == "kaelthas"

    def test_hyphen_in_display_name_removed(self):
        assert normalize_realm_slug("Azjol-Nerub") == "azjolnerub"

    def test_surrounding_whitespace_trimmed(self):
        assert normalize_realm_slug("  Stormrage ") == "stormrage"

    def test_german_umlauts(self):
        assert normalize_realm_slug("Die Aldor") == "die-aldor"
        assert normalize_realm_slug("Todeswache Ü") == "todeswache-u"

    def test_french_accents(self):
        assert normalize_realm_slug("Confrérie du Thorium") == "confrerie-du-thorium"

    def test_existing_slug_unchanged(self):
        assert normalize_realm_slug("twisting-nether") == "twisting-nether"
        assert normalize_realm_slug("area-52") == "area-52"

    def test_empty_string(self):
        assert normalize_realm_slug("") == ""

    def test_non_latin_letters_kept(self):
        assert normalize_realm_slug("Гордунни") == "гордунни"


class TestIdempotence:
    @pytest.mark.parametrize(
        "name",
        [
            "Twisting Nether",
            "Área-52",
            "Mal'Ganis",
            "  Zul'jin  ",
            "Confrérie du Thorium",
            "a -\tb",
            "x\t-",
            "é́ ",
            "Ἀθῆναι",
            "İstanbul",
            "---",
            "' '",
        ],
    )
    def test_known_inputs(self, name):
        once = normalize_realm_slug(name)
        assert normalize_realm_slug(once) == once

    def test_random_inputs(self):
        rng = random.Random(1234)
        alphabet = string.ascii_letters + " -'’\t" + "áéíóúñüçÅØÆß" + "́̈"
        for _ in range(500):
            name = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 20)))
            once = normalize_realm_slug(name)
            assert normalize_realm_slug(once) == once, repr(name)


class TestIsCanonicalSlug:
    def test_canonical(self):
        assert is_canonical_slug("twisting-nether")
        assert is_canonical_slug("area52")

    def test_uppercase_not_canonical(self):
        assert not is_canonical_slug("Stormrage")

    def test_space_not_canonical(self):
        assert not is_canonical_slug("twisting nether")

    def test_apostrophe_not_canonical(self):
        assert not is_canonical_slug("malganis'")

    def test_diacritic_not_canonical(self):
        assert not is_canonical_slug("área52")

    def test_padding_not_canonical(self):
        assert not is_canonical_slug(" area52")
