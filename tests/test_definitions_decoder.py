"""Tests for definition decoding, including the tolerant described/licensed handling."""

import copy
import json
import logging
from datetime import date

import pytest

from coordinates import CoordVersion, Provider, Shape
from definitions.decoder import decode_definition, decode_definitions
from definitions.models import DefCoords, Hashes, Scores, SourceLocation, TopLevelScore
from errors import JsonError

SCORE = {"total": 100, "date": 30, "source": 70}
LICENSE_SCORE = {"total": 60, "declared": 30, "discovered": 0, "consistency": 0, "spdx": 15, "texts": 15}

DEFINITION = {
    "coordinates": {"type": "crate", "provider": "cratesio", "name": "syn", "revision": "1.0.14"},
    "described": {
        "releaseDate": "2020-01-25",
        "sourceLocation": {
            "type": "git",
            "provider": "github",
            "namespace": "dtolnay",
            "name": "syn",
            "revision": "d6f0e6ddd7c4d3a6d5bfbc0e37d2b3a5ac1d8e58",
            "url": "https://github.com/dtolnay/syn/tree/d6f0e6ddd7c4d3a6d5bfbc0e37d2b3a5ac1d8e58",
        },
        "projectWebsite": "https://github.com/dtolnay/syn",
        "urls": {
            "registry": "https://crates.io/crates/syn",
            "version": "https://crates.io/crates/syn/1.0.14",
        },
        "hashes": {"sha1": "af0b1a1c2e2a4c9e6c0b4a7c6a25c9b49f8c41e2"},
        "files": 46,
        "tools": ["clearlydefined/1.3.1", "licensee/9.13.0", "scancode/3.2.2"],
        "toolScore": SCORE,
        "score": SCORE,
    },
    "licensed": {
        "declared": "Apache-2.0 OR MIT",
        "toolScore": LICENSE_SCORE,
        "facets": {
            "core": {
                "attribution": {"unknown": 44, "parties": ["Copyright (c) David Tolnay"]},
                "discovered": {"unknown": 44, "expressions": ["Apache-2.0", "MIT"]},
                "files": 46,
            }
        },
        "score": LICENSE_SCORE,
    },
    "files": [
        {
            "path": "Cargo.toml",
            "hashes": {"sha1": "1b2c", "sha256": "3d4e"},
            "license": "Apache-2.0 OR MIT",
            "natures": ["license"],
            "token": "3d4e5f",
        },
        {"path": "src/lib.rs"},
    ],
    "scores": {"effective": 80, "tool": 80},
    "_meta": {"schemaVersion": "1.6.1", "updated": "2020-02-01T00:00:00.000Z"},
}

# What the service returns for a component it has not harvested yet
UNHARVESTED = {
    "coordinates": {"type": "crate", "provider": "cratesio", "name": "nope", "revision": "0.1.0"},
    "described": {"tools": [], "toolScore": {"total": 0, "date": 0, "source": 0},
                  "score": {"total": 0, "date": 0, "source": 0}},
    "licensed": {
        "toolScore": dict.fromkeys(LICENSE_SCORE, 0),
        "facets": {"core": {"attribution": {"unknown": 0}, "discovered": {"unknown": 0}, "files": 0}},
        "score": dict.fromkeys(LICENSE_SCORE, 0),
    },
    "scores": {"effective": 0, "tool": 0},
}


def _definition(**overrides):
    data = copy.deepcopy(DEFINITION)
    for key, value in overrides.items():
        if value is None and key.endswith("_removed"):
            del data[key[: -len("_removed")]]
        else:
            data[key] = value
    return data


def _dumps(data):
    return json.dumps(data).encode("utf-8")


class TestDecodeDefinition:
    """Decoding a single, fully harvested definition."""

    def test_full_definition(self):
        definition = decode_definition(_dumps(DEFINITION))

        assert definition.coordinates == DefCoords(
            shape=Shape.CRATE,
            provider=Provider.CRATESIO,
            name="syn",
            revision=CoordVersion.parse("1.0.14"),
        )
        assert str(definition.coordinates) == "crate/cratesio/-/syn/1.0.14"

        described = definition.described
        assert described is not None
        assert described.release_date == date(2020, 1, 25)
        assert described.source_location == SourceLocation(
            type="git",
            provider="github",
            namespace="dtolnay",
            name="syn",
            revision="d6f0e6ddd7c4d3a6d5bfbc0e37d2b3a5ac1d8e58",
            url="https://github.com/dtolnay/syn/tree/d6f0e6ddd7c4d3a6d5bfbc0e37d2b3a5ac1d8e58",
        )
        assert described.project_website == "https://github.com/dtolnay/syn"
        assert described.urls["registry"] == "https://crates.io/crates/syn"
        assert described.hashes == Hashes(sha1="af0b1a1c2e2a4c9e6c0b4a7c6a25c9b49f8c41e2")
        assert described.files == 46
        assert described.tools == ("clearlydefined/1.3.1", "licensee/9.13.0", "scancode/3.2.2")
        assert described.score == Scores(total=100, date=30, source=70)

        licensed = definition.licensed
        assert licensed is not None
        assert licensed.declared == "Apache-2.0 OR MIT"
        assert licensed.facets.core.attribution.parties == ("Copyright (c) David Tolnay",)
        assert licensed.facets.core.discovered.expressions == ("Apache-2.0", "MIT")
        assert licensed.score.spdx == 15

        assert len(definition.files) == 2
        assert definition.files[0].hashes == Hashes(sha1="1b2c", sha256="3d4e")
        assert definition.files[0].natures == ("license",)
        assert definition.files[1].path == "src/lib.rs"
        assert definition.files[1].hashes is None
        assert definition.files[1].attributions == ()
        assert definition.scores == TopLevelScore(effective=80, tool=80)

    def test_accepts_str_payload(self):
        assert decode_definition(json.dumps(DEFINITION)).coordinates.name == "syn"

    def test_namespace_in_coordinates(self):
        data = _definition(coordinates={
            "type": "git", "provider": "github", "namespace": "myorg",
            "name": "myrepo", "revision": "abcdef",
        })

        coords = decode_definition(_dumps(data)).coordinates

        assert coords.namespace == "myorg"
        assert str(coords) == "git/github/myorg/myrepo/abcdef"

    def test_dash_namespace_means_none(self):
        data = _definition()
        data["coordinates"]["namespace"] = "-"

        assert decode_definition(_dumps(data)).coordinates.namespace is None

    def test_definition_is_hashable(self):
        first = decode_definition(_dumps(DEFINITION))
        second = decode_definition(_dumps(DEFINITION))

        assert hash(first) == hash(second)
        assert first == second
        assert len({first, second}) == 1

    def test_urls_are_read_only(self):
        described = decode_definition(_dumps(DEFINITION)).described

        with pytest.raises(TypeError):
            described.urls["homepage"] = "https://example.invalid"
        assert described.urls == DEFINITION["described"]["urls"]

    def test_unknown_keys_are_ignored(self):
        data = _definition(somethingNew={"nested": [1, 2, 3]})
        data["described"]["futureField"] = True

        definition = decode_definition(_dumps(data))

        assert definition.described is not None


class TestTolerantSections:
    """described/licensed become None when present but unparseable."""

    @pytest.mark.parametrize("value", [None, {}, [], "pending", {"releaseDate": "not a date"}])
    def test_invalid_described_becomes_none(self, value):
        definition = decode_definition(_dumps(_definition(described=value)))

        assert definition.described is None
        assert definition.licensed is not None

    def test_invalid_licensed_becomes_none(self):
        data = _definition()
        del data["licensed"]["declared"]

        definition = decode_definition(_dumps(data))

        assert definition.licensed is None
        assert definition.described is not None

    @pytest.mark.parametrize("release_date", ["2020-1-5", "2020-02-30", "20200125", "2020-01-25T00:00:00"])
    def test_non_iso_release_date_discards_described(self, release_date):
        data = _definition()
        data["described"]["releaseDate"] = release_date

        definition = decode_definition(_dumps(data))

        assert definition.described is None
        assert definition.licensed is not None

    def test_invalid_nested_field_discards_only_that_section(self):
        data = _definition()
        data["described"]["score"]["total"] = -1

        definition = decode_definition(_dumps(data))

        assert definition.described is None
        assert definition.licensed is not None

    def test_missing_described_key_is_fatal(self):
        with pytest.raises(JsonError, match="missing field `described`"):
            decode_definition(_dumps(_definition(described_removed=None)))

    def test_missing_licensed_key_is_fatal(self):
        with pytest.raises(JsonError, match="missing field `licensed`"):
            decode_definition(_dumps(_definition(licensed_removed=None)))

    def test_unharvested_component(self):
        definition = decode_definition(_dumps(UNHARVESTED))

        assert definition.coordinates.name == "nope"
        assert definition.described is None
        assert definition.licensed is None
        assert definition.files == ()

    def test_discarded_section_is_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="definitions.decoder"):
            decode_definition(_dumps(_definition(described=None)))

        assert any(r.getMessage() == "Discarding unparseable section" for r in caplog.records)


class TestDefaults:
    """files and scores fall back to empty values when absent."""

    def test_missing_files_defaults_to_empty(self):
        definition = decode_definition(_dumps(_definition(files_removed=None)))

        assert definition.files == ()

    def test_missing_scores_defaults_to_zero(self):
        definition = decode_definition(_dumps(_definition(scores_removed=None)))

        assert definition.scores == TopLevelScore(effective=0, tool=0)

    def test_null_files_is_fatal(self):
        with pytest.raises(JsonError, match="files"):
            decode_definition(_dumps(_definition(files=None)))

    def test_out_of_range_top_level_score_is_fatal(self):
        with pytest.raises(JsonError, match="u8"):
            decode_definition(_dumps(_definition(scores={"effective": 256, "tool": 0})))


class TestFatalErrors:
    """coordinates, duplicates and malformed payloads abort decoding."""

    def test_missing_coordinates(self):
        with pytest.raises(JsonError, match="missing field `coordinates`"):
            decode_definition(_dumps(_definition(coordinates_removed=None)))

    def test_unknown_shape_in_coordinates(self):
        data = _definition()
        data["coordinates"]["type"] = "npm"

        with pytest.raises(JsonError, match="unknown shape 'npm'"):
            decode_definition(_dumps(data))

    def test_numeric_revision_is_rejected(self):
        data = _definition()
        data["coordinates"]["revision"] = 1

        with pytest.raises(JsonError, match="revision"):
            decode_definition(_dumps(data))

    @pytest.mark.parametrize("key", ["coordinates", "described", "licensed", "files", "scores"])
    def test_duplicate_known_key(self, key):
        body = json.dumps(DEFINITION)[:-1] + f', "{key}": {json.dumps(DEFINITION[key])}}}'

        with pytest.raises(JsonError, match=f"duplicate field `{key}`"):
            decode_definition(body.encode("utf-8"))

    def test_duplicate_unknown_key_is_ignored(self):
        body = json.dumps(DEFINITION)[:-1] + ', "_meta": {}}'

        assert decode_definition(body).coordinates.name == "syn"

    def test_duplicate_inside_coordinates(self):
        body = json.dumps(DEFINITION).replace(
            '"name": "syn", "revision"', '"name": "syn", "name": "syn", "revision"', 1
        )

        with pytest.raises(JsonError, match="duplicate field `name`"):
            decode_definition(body)

    @pytest.mark.parametrize("payload", [b"", b"{", b"not json", b"\xff\xfe\x00", b'{"a": NaN}'])
    def test_malformed_json(self, payload):
        with pytest.raises(JsonError, match="malformed JSON"):
            decode_definition(payload)

    def test_deeply_nested_json(self):
        payload = b'{"a":' * 100000 + b'1' + b'}' * 100000

        with pytest.raises(JsonError, match="nesting too deep"):
            decode_definitions(payload)

    @pytest.mark.parametrize("payload", [b"[]", b"null", b"42"])
    def test_non_object_definition(self, payload):
        with pytest.raises(JsonError, match="struct Definition"):
            decode_definition(payload)


class TestDecodeDefinitions:
    """Decoding the batch response map."""

    def test_batch_with_null_described(self):
        data = _definition(described=None)
        payload = _dumps({"crate/cratesio/-/syn/1.0.14": data})

        definitions = decode_definitions(payload)

        assert len(definitions) == 1
        assert definitions[0].described is None
        assert definitions[0].licensed is not None
        assert definitions[0].files != ()
        assert definitions[0].scores.effective == 80

    def test_batch_preserves_encounter_order(self):
        payload = _dumps({
            "crate/cratesio/-/syn/1.0.14": DEFINITION,
            "crate/cratesio/-/nope/0.1.0": UNHARVESTED,
        })

        names = [d.coordinates.name for d in decode_definitions(payload)]

        assert names == ["syn", "nope"]

    def test_empty_batch(self):
        assert decode_definitions(b"{}") == []

    def test_one_bad_definition_aborts_batch(self):
        payload = _dumps({
            "crate/cratesio/-/syn/1.0.14": DEFINITION,
            "crate/cratesio/-/bad/0.1.0": _definition(coordinates_removed=None),
        })

        with pytest.raises(JsonError, match="crate/cratesio/-/bad/0.1.0: missing field `coordinates`"):
            decode_definitions(payload)

    def test_non_object_batch(self):
        with pytest.raises(JsonError, match="expected a map"):
            decode_definitions(b"[]")
