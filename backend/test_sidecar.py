"""Sidecar comment codec tests"""

import json

from flowbridge.dsl.sidecar import (
    EdgeLineStyle,
    EdgeOverrideEntry,
    LayoutEntry,
    Sidecar,
    StyleEntry,
    decode_sidecar,
    encode_sidecar,
    entry_to_style,
    is_sidecar_line,
    style_to_entry,
)
from flowbridge.ir.style import StyleOverride


def test_decodes_versioned_envelope():
    sidecar = decode_sidecar([
        'graph TD',
        '%% layout: {"v":1,"data":{"A":{"x":40,"y":20,"w":180,"h":70}}}',
    ])
    entry = sidecar.positions["A"]
    assert (entry.x, entry.y, entry.w, entry.h) == (40, 20, 180, 70)


def test_decodes_legacy_bare_payloads():
    sidecar = decode_sidecar([
        '%% layout: {"A":{"x":1,"y":2}}',
        '%% styles: {"A":{"strokeColor":"#00ff00"}}',
        '%% edges: [{"source":"A","target":"B","sourceHandle":"right"}]',
    ])
    assert sidecar.positions["A"].x == 1
    assert sidecar.styles["A"].stroke_color == "#00ff00"
    assert sidecar.edges[0].source_handle == "right"


def test_fill_is_an_alias_of_color():
    sidecar = decode_sidecar(['%% styles: {"A":{"fill":"#123456"},"B":{"color":"#abcdef"}}'])
    assert sidecar.styles["A"].fill == "#123456"
    assert sidecar.styles["B"].fill == "#abcdef"


def test_malformed_channel_is_empty_and_others_survive():
    sidecar = decode_sidecar([
        '%% layout: {"A": {"x": 1, "y"',
        '%% styles: {"A":{"strokeColor":"#00ff00"}}',
    ])
    assert sidecar.positions == {}
    assert "A" in sidecar.styles


def test_invalid_entry_is_dropped_alone():
    sidecar = decode_sidecar(['%% layout: {"A":{"x":"left","y":0},"B":{"x":5,"y":6}}'])
    assert "A" not in sidecar.positions
    assert sidecar.positions["B"].y == 6

    sidecar = decode_sidecar(['%% edges: [{"target":"B"},{"source":"A","target":"B"}]'])
    assert len(sidecar.edges) == 1


def test_non_finite_numbers_are_dropped_per_entry():
    sidecar = decode_sidecar([
        '%% layout: {"A":{"x":NaN,"y":10},"B":{"x":5,"y":Infinity},"C":{"x":1,"y":2}}',
        '%% styles: {"A":{"strokeWidth":-Infinity},"B":{"textColor":"#010101"}}',
    ])
    assert set(sidecar.positions) == {"C"}
    assert set(sidecar.styles) == {"B"}


def test_first_line_per_tag_wins():
    sidecar = decode_sidecar([
        '%% layout: {"A":{"x":1,"y":1}}',
        '%% layout: {"A":{"x":99,"y":99}}',
    ])
    assert sidecar.positions["A"].x == 1


def test_first_key_wins_within_object():
    sidecar = decode_sidecar(['%% layout: {"A":{"x":1,"y":1},"A":{"x":2,"y":2}}'])
    assert sidecar.positions["A"].x == 1


def test_newer_version_reads_known_fields():
    sidecar = decode_sidecar(['%% layout: {"v":7,"data":{"A":{"x":3,"y":4,"z":9}}}'])
    assert sidecar.positions["A"].x == 3


def test_encode_wraps_in_envelope_and_skips_empty_channels():
    sidecar = Sidecar(positions={"A": LayoutEntry(x=40.0, y=20.0)})
    lines = encode_sidecar(sidecar)
    assert lines == ['%% layout: {"v":1,"data":{"A":{"x":40,"y":20}}}']


def test_encode_uses_camel_case_keys():
    sidecar = Sidecar(
        styles={"A": style_to_entry(StyleOverride(stroke_color="#00ff00", label_bg="#fff"))},
        edges=[EdgeOverrideEntry(
            source="A",
            target="B",
            source_handle="right",
            style=EdgeLineStyle(stroke="#f00", stroke_dasharray="5,5"),
        )],
    )
    styles_line, edges_line = encode_sidecar(sidecar)

    styles = json.loads(styles_line.split("styles:", 1)[1])
    assert styles["data"] == {"A": {"strokeColor": "#00ff00", "labelBgColor": "#fff"}}

    edges = json.loads(edges_line.split("edges:", 1)[1])
    assert edges["data"] == [{
        "source": "A",
        "target": "B",
        "sourceHandle": "right",
        "style": {"stroke": "#f00", "strokeDasharray": "5,5"},
    }]


def test_encoded_lines_decode_back():
    sidecar = Sidecar(
        positions={"A": LayoutEntry(x=10, y=20, w=100, h=50)},
        styles={"A": StyleEntry(fill="#111111", text_color="#222222")},
    )
    decoded = decode_sidecar(encode_sidecar(sidecar))
    assert decoded.positions["A"].w == 100
    assert entry_to_style(decoded.styles["A"]) == StyleOverride(fill="#111111", text_color="#222222")


def test_is_sidecar_line():
    assert is_sidecar_line('%% layout: {}')
    assert is_sidecar_line('   %%edges: []')
    assert not is_sidecar_line('%% just a comment')
    assert not is_sidecar_line('A --> B')
