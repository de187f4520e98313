"""Tests for lockfile serialization, parsing and the bounce check."""

from __future__ import annotations

import json

import pytest

from lockwright.core.dependency.resolver import Resolution
from lockwright.core.lockfile.codec import GENERATED_BY, LOCKFILE_VERSION, LockfileCodec
from lockwright.core.sources.memory import MemorySource
from lockwright.exceptions import (
    LockfileError,
    RoundTripInconsistencyError,
    UnresolvableError,
)


# ===========================================================================
# Serialization
# ===========================================================================


class TestSerialize:
    """Canonical lockfile text."""

    def test_document_layout(self, resolution: Resolution) -> None:
        data = json.loads(LockfileCodec().serialize(resolution))
        assert data["lockfile_version"] == LOCKFILE_VERSION
        assert data["generated_by"] == GENERATED_BY
        assert len(data["sources"]) == 1
        entry = data["sources"][0]
        assert entry["type"] == "memory"
        assert entry["options"] == {"label": "main"}
        assert [m["name"] for m in entry["manifests"]] == ["B", "C", "A"]
        assert entry["manifests"][2] == {
            "dependencies": [{"name": "C", "requirement": ">= 1", "source": 0}],
            "name": "A",
            "version": "2.0",
        }
        assert data["dependencies"] == [
            {"name": "A", "requirement": ">= 1.0", "source": 0},
            {"name": "B", "requirement": "*", "source": 0},
        ]

    def test_text_format(self, resolution: Resolution) -> None:
        codec = LockfileCodec()
        text = codec.serialize(resolution)
        assert text.endswith("}\n")
        assert text == json.dumps(codec.to_dict(resolution), indent=2, sort_keys=True) + "\n"

    def test_output_ignores_input_order(self, resolution: Resolution) -> None:
        shuffled = Resolution(
            tuple(reversed(resolution.dependencies)),
            tuple(reversed(resolution.manifests)),
        )
        codec = LockfileCodec()
        assert codec.serialize(shuffled) == codec.serialize(resolution)

    def test_sources_ordered_by_identity(self) -> None:
        a, b = MemorySource("a-src"), MemorySource("b-src")
        y = a.manifest("Y", "1.0")
        x = b.manifest("X", "1.0", [a.dependency("Y")])
        data = LockfileCodec().to_dict(Resolution((b.dependency("X"),), (x, y)))
        assert [s["options"]["label"] for s in data["sources"]] == ["a-src", "b-src"]
        assert data["sources"][1]["manifests"][0]["dependencies"][0]["source"] == 0
        assert data["dependencies"][0]["source"] == 1

    def test_failed_resolution_cannot_be_serialized(self, main_source: MemorySource) -> None:
        failed = Resolution((main_source.dependency("Z"),), None, ["No candidate satisfies Z"])
        with pytest.raises(UnresolvableError):
            LockfileCodec().serialize(failed)


# ===========================================================================
# Parsing
# ===========================================================================


class TestParse:
    """Rebuilding resolutions from lockfile text."""

    def test_round_trip(self, resolution: Resolution) -> None:
        codec = LockfileCodec()
        parsed = codec.parse(codec.serialize(resolution))
        assert parsed.correct
        assert set(parsed.manifests) == set(resolution.manifests)
        assert set(parsed.dependencies) == set(resolution.dependencies)

    def test_known_sources_are_reused(
        self, resolution: Resolution, main_source: MemorySource
    ) -> None:
        codec = LockfileCodec(known_sources=[main_source])
        parsed = codec.parse(codec.serialize(resolution))
        assert all(m.source is main_source for m in parsed.manifests)

    def test_unknown_sources_are_rebuilt(
        self, resolution: Resolution, main_source: MemorySource
    ) -> None:
        codec = LockfileCodec()
        parsed = codec.parse(codec.serialize(resolution))
        rebuilt = parsed.manifests[0].source
        assert rebuilt == main_source
        assert rebuilt is not main_source

    def test_cyclic_resolution_round_trips(self) -> None:
        source = MemorySource("main")
        x = source.manifest("X", "1.0", {"Y": "*"})
        y = source.manifest("Y", "1.0", {"X": "*"})
        codec = LockfileCodec()
        text = codec.serialize(Resolution((source.dependency("X"),), (x, y)))
        assert codec.bounce(text) == text


# ===========================================================================
# Malformed input
# ===========================================================================


def _valid_document(resolution: Resolution) -> dict:
    return json.loads(LockfileCodec().serialize(resolution))


class TestMalformed:
    """Invalid lockfiles raise LockfileError."""

    def test_invalid_json(self) -> None:
        with pytest.raises(LockfileError, match="not valid JSON"):
            LockfileCodec().parse("{not json")

    def test_not_an_object(self) -> None:
        with pytest.raises(LockfileError, match="JSON object"):
            LockfileCodec().parse("[]")

    def test_unsupported_version(self, resolution: Resolution) -> None:
        data = _valid_document(resolution)
        data["lockfile_version"] = 99
        with pytest.raises(LockfileError, match="Unsupported lockfile version"):
            LockfileCodec().from_dict(data)

    def test_unknown_source_type(self, resolution: Resolution) -> None:
        data = _valid_document(resolution)
        data["sources"][0]["type"] = "ftp"
        with pytest.raises(LockfileError, match="Unknown source type"):
            LockfileCodec().from_dict(data)

    def test_dangling_source_index(self, resolution: Resolution) -> None:
        data = _valid_document(resolution)
        data["dependencies"][0]["source"] = 5
        with pytest.raises(LockfileError, match="Dangling source index"):
            LockfileCodec().from_dict(data)

    def test_missing_key(self, resolution: Resolution) -> None:
        data = _valid_document(resolution)
        del data["dependencies"]
        with pytest.raises(LockfileError, match="Malformed"):
            LockfileCodec().from_dict(data)

    def test_invalid_version(self, resolution: Resolution) -> None:
        data = _valid_document(resolution)
        data["sources"][0]["manifests"][0]["version"] = "x.y"
        with pytest.raises(LockfileError, match="Malformed"):
            LockfileCodec().from_dict(data)

    def test_duplicate_manifest(self, resolution: Resolution) -> None:
        data = _valid_document(resolution)
        manifests = data["sources"][0]["manifests"]
        manifests.append(dict(manifests[0]))
        with pytest.raises(LockfileError, match="Duplicate manifest name"):
            LockfileCodec().from_dict(data)


# ===========================================================================
# Bounce
# ===========================================================================


class TestBounce:
    """The parse/serialize round-trip check."""

    def test_canonical_text_bounces(self, resolution: Resolution) -> None:
        codec = LockfileCodec()
        text = codec.serialize(resolution)
        assert codec.bounce(text) == text
        codec.ensure_round_trip(text)

    def test_non_canonical_text_is_rejected(self, resolution: Resolution) -> None:
        codec = LockfileCodec()
        reformatted = json.dumps(codec.to_dict(resolution), indent=4, sort_keys=True) + "\n"
        with pytest.raises(RoundTripInconsistencyError, match="Cannot bounce Lockfile.yaml.lock!"):
            codec.ensure_round_trip(reformatted, "Lockfile.yaml.lock")

    def test_round_trip_error_is_a_lockfile_error(self) -> None:
        assert issubclass(RoundTripInconsistencyError, LockfileError)
