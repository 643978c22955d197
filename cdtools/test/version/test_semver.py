"""Tests for cdtools.version.semver."""

from __future__ import annotations

import pytest

from cdtools.version.semver import (
    Version,
    VersionFormatError,
    bump_rank,
    bump_version,
    compare_bump_level,
    format_version,
    parse_version,
)


class TestParse:
    def test_plain_version(self) -> None:
        assert parse_version("1.2.3") == Version(1, 2, 3)

    def test_prerelease_is_kept_verbatim(self) -> None:
        v = parse_version("1.0.1-alpha.20240102030405")
        assert v.core == Version(1, 0, 1)
        assert v.prerelease == "alpha.20240102030405"

    @pytest.mark.parametrize("text", ["", "1.0", "1.0.x", "v1.0.0", "1.0.0-", " 1.0.0", "1.0.0.0"])
    def test_rejects_malformed(self, text: str) -> None:
        with pytest.raises(VersionFormatError, match="Invalid version format"):
            parse_version(text)

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_version("invalid")


class TestFormat:
    @pytest.mark.parametrize("text", ["0.0.0", "10.20.30", "1.0.0-rc.3", "2.1.0-alpha.x.y"])
    def test_round_trip(self, text: str) -> None:
        assert format_version(parse_version(text)) == text

    def test_omits_missing_prerelease(self) -> None:
        assert format_version(Version(1, 2, 3)) == "1.2.3"
        assert str(Version(1, 2, 3, "rc.0")) == "1.2.3-rc.0"


class TestBump:
    def test_levels(self) -> None:
        assert bump_version("1.0.0", "patch") == "1.0.1"
        assert bump_version("1.0.0", "minor") == "1.1.0"
        assert bump_version("1.0.0", "major") == "2.0.0"

    def test_chained(self) -> None:
        v = bump_version(bump_version(bump_version("1.0.0", "major"), "minor"), "patch")
        assert v == "2.1.1"

    def test_minor_and_major_reset_lower_components(self) -> None:
        assert bump_version("1.4.7", "minor") == "1.5.0"
        assert bump_version("1.4.7", "major") == "2.0.0"

    def test_prerelease_discarded(self) -> None:
        assert bump_version("1.0.1-alpha.2", "patch") == "1.0.2"
        assert bump_version("2.1.0-beta.5", "minor") == "2.2.0"
        assert bump_version("1.5.3-rc.1", "major") == "2.0.0"

    def test_rank_order(self) -> None:
        assert bump_rank("patch") < bump_rank("minor") < bump_rank("major")


class TestCompareBumpLevel:
    def test_equal_is_none(self) -> None:
        assert compare_bump_level("1.0.0", "1.0.0") is None

    def test_lower_is_none(self) -> None:
        assert compare_bump_level("1.2.0", "1.1.9") is None

    def test_minor(self) -> None:
        assert compare_bump_level("1.0.0", "1.1.0") == "minor"

    def test_major_ignores_prerelease(self) -> None:
        assert compare_bump_level("1.0.0", "2.0.0-rc.3") == "major"

    def test_patch_with_suffix(self) -> None:
        assert compare_bump_level("1.0.0", "1.0.1-alpha.20240101000000") == "patch"

    def test_same_core_with_suffix_is_none(self) -> None:
        assert compare_bump_level("1.0.0", "1.0.0-alpha.1") is None
