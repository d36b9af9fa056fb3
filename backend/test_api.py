"""HTTP surface tests"""

from fastapi.testclient import TestClient

from flowbridge.api.serializers import graph_from_dict, graph_to_dict
from flowbridge.ir.payloads import ErPayload, SequencePayload
from flowbridge.main import app
import flowbridge

client = TestClient(app)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_detect():
    response = client.post("/detect", json={"text": "erDiagram\n    A ||--o{ B : has"})
    assert response.json() == {"dialect": "er"}


def test_parse_returns_plain_graph_json():
    response = client.post("/parse", json={"text": "graph TD\n    A[Start] --> B{Check}"})
    body = response.json()
    assert body["status"] == "success"
    assert body["dialect"] == "flowchart"

    nodes = {n["id"]: n for n in body["graph"]["nodes"]}
    assert nodes["B"]["kind"] == "diamond"
    assert set(nodes["A"]["position"]) == {"x", "y"}
    assert body["graph"]["edges"][0]["arrow_kind"] == "solid"


def test_parse_unsupported():
    body = client.post("/parse", json={"text": "journey\n    title Day"}).json()
    assert body["status"] == "unsupported"
    assert body["graph"]["nodes"][0]["dialect_data"]["type"] == "unsupported"


def test_serialize_round_trip_through_json():
    parsed = client.post("/parse", json={"text": "sequenceDiagram\n    A->>B: hi"}).json()
    response = client.post("/serialize", json={"graph": parsed["graph"]})
    body = response.json()
    assert body["status"] == "success"
    assert body["text"].splitlines()[:4] == [
        "sequenceDiagram",
        "    participant A",
        "    participant B",
        "    A->>B: hi",
    ]


def test_serialize_rejects_malformed_graph():
    body = client.post("/serialize", json={"graph": {"nodes": [{"label": "no id"}]}}).json()
    assert body["status"] == "error"
    assert body["text"] == ""


def test_serialize_rejects_non_object_position():
    graph = {"nodes": [{"id": "A", "position": [1, 2]}]}
    body = client.post("/serialize", json={"graph": graph}).json()
    assert body["status"] == "error"
    assert body["text"] == ""


def test_payloads_are_tagged_and_restored():
    graph = flowbridge.parse("erDiagram\n    A {\n        int id PK\n    }\n    A ||--o{ B : has")
    data = graph_to_dict(graph)
    assert data["nodes"][0]["dialect_data"]["type"] == "er"

    restored = graph_from_dict(data)
    assert isinstance(restored.nodes[0].dialect_data, ErPayload)
    assert restored.nodes[0].dialect_data.attributes[0].constraint == "PK"
    assert flowbridge.serialize(restored) == flowbridge.serialize(graph)


def test_sequence_payload_round_trip():
    graph = flowbridge.parse("sequenceDiagram\n    actor U\n    U->>S: go")
    restored = graph_from_dict(graph_to_dict(graph))
    participant = restored.get_node("participant_U")
    assert isinstance(participant.dialect_data, SequencePayload)
    assert participant.dialect_data.is_actor
