from pydantic import BaseModel
from typing import Optional, Dict, Any


class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    status: str
    dialect: str
    graph: Dict[str, Any]
    message: Optional[str] = None


class SerializeRequest(BaseModel):
    graph: Dict[str, Any]   # graph_to_dict() shape


class SerializeResponse(BaseModel):
    status: str
    text: str
    message: Optional[str] = None


class DetectRequest(BaseModel):
    text: str


class DetectResponse(BaseModel):
    dialect: str
