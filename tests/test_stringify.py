from __future__ import annotations

from dataclasses import dataclass, field

from statediff.services.stringify import decode_text, detect_encoding, dump_to_string


@dataclass
class Profile:
    name: str
    tags: set[str] = field(default_factory=set)
    prefs: dict[str, int] = field(default_factory=dict)


def test_mapping_order_does_not_change_dump():
    first = {"b": 2, "a": 1, "c": {"y": 1, "x": 2}}
    second = {"c": {"x": 2, "y": 1}, "a": 1, "b": 2}

    assert dump_to_string(first) == dump_to_string(second)


def test_short_sets_are_sorted():
    assert dump_to_string({"gamma", "alpha", "beta"}) == "{'alpha', 'beta', 'gamma'}"
    assert dump_to_string(frozenset({3, 1, 2})) == "frozenset({1, 2, 3})"


def test_short_dataclass_is_deterministic():
    profile = Profile("ann", {"b", "a"}, {"z": 1, "y": 2})

    assert dump_to_string(profile) == "Profile(name='ann', tags={'a', 'b'}, prefs={'y': 2, 'z': 1})"


def test_wide_values_are_split_over_lines():
    profile = Profile(
        "someone with a rather long name",
        {f"tag-{i}" for i in range(10)},
        {f"pref-{i}": i for i in range(10)},
    )

    dump = dump_to_string(profile)

    assert "\n" in dump
    assert dump == dump_to_string(Profile(
        "someone with a rather long name",
        {f"tag-{i}" for i in reversed(range(10))},
        {f"pref-{i}": i for i in reversed(range(10))},
    ))


def test_detect_encoding_defaults():
    assert detect_encoding(b"") == "utf-8"
    assert detect_encoding(b"plain ascii text") == "utf-8"


def test_decode_utf8_text():
    text = "Grüße aus Köln, schöne Größe, süße Äpfel und Öl. " * 10

    assert decode_text(text.encode("utf-8")) == text
