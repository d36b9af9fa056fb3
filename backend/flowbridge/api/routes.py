import logging

from fastapi import APIRouter

import flowbridge
from flowbridge.api.serializers import graph_from_dict, graph_to_dict
from flowbridge.ir.graph import Dialect, infer_dialect
from flowbridge.schemas import (
    DetectRequest,
    DetectResponse,
    ParseRequest,
    ParseResponse,
    SerializeRequest,
    SerializeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="",
    tags=["converter"],
)


@router.get("/health")
def health():
    return {"status": "ok", "version": flowbridge.__version__}


@router.post("/detect", response_model=DetectResponse)
def detect(request: DetectRequest):
    return DetectResponse(dialect=flowbridge.detect_dialect(request.text).value)


@router.post("/parse", response_model=ParseResponse)
def parse(request: ParseRequest):
    graph = flowbridge.parse(request.text)
    dialect = infer_dialect(graph)
    status = "error" if any(n.id == flowbridge.ERROR_NODE_ID for n in graph.nodes) else "success"
    if dialect == Dialect.UNSUPPORTED:
        status = "unsupported"
    return ParseResponse(status=status, dialect=dialect.value, graph=graph_to_dict(graph))


@router.post("/serialize", response_model=SerializeResponse)
def serialize(request: SerializeRequest):
    try:
        graph = graph_from_dict(request.graph)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning("[API] Rejected graph payload: %s", e)
        return SerializeResponse(status="error", text="", message=f"Invalid graph: {e}")

    return SerializeResponse(status="success", text=flowbridge.serialize(graph))
