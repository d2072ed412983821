from typing import List, Dict, Any, Literal, Optional
from pydantic import BaseModel, Field


class PortModel(BaseModel):
    id: str
    side: Optional[str] = None
    alignment: str = "CENTER"
    size: float = 0.0


class NodeModel(BaseModel):
    id: str
    type: Optional[str] = None
    width: float = 0.0
    height: float = 0.0
    ports: List[PortModel] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)
    parent: Optional[str] = None
    text: Optional[str] = None


class EdgeModel(BaseModel):
    id: str
    source: str
    target: str
    source_port: Optional[str] = None
    target_port: Optional[str] = None
    text: Optional[str] = None
    parent: Optional[str] = None


class CanvasResponse(BaseModel):
    nodes: List[NodeModel]
    edges: List[EdgeModel]


class VariableModel(BaseModel):
    name: str
    label: str
    type: Optional[str] = None
    choices: List[Dict[str, Any]] = Field(default_factory=list)


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: List[str]
    warnings: List[str]


class ReachabilityResponse(BaseModel):
    # node id -> has an inbound edge on its WEST port
    reachable: Dict[str, bool]
    # ids with a directed path from the start node
    from_start: List[str]


class MutationRequest(BaseModel):
    element_id: str
    element_type: Literal["node", "edge"]
    operation_type: Literal["add", "patch", "delete"]
    changes: Optional[Dict[str, Any]] = None
    delay_ms: Optional[float] = None


class MutationResponse(BaseModel):
    id: str
    status: str
    element_id: str
    element_type: str
    operation_type: str
    changes: Optional[Dict[str, Any]] = None
    delay_ms: float
    applied_at: Optional[str] = None


class AppendNodeRequest(BaseModel):
    node_type: str
    from_node_id: str
    from_port_id: Optional[str] = None


class InsertNodeRequest(BaseModel):
    node_type: str
    edge_id: str


class RemoveNodesRequest(BaseModel):
    node_ids: List[str]


class ConnectRequest(BaseModel):
    from_node_id: str
    from_port_id: Optional[str] = None
    to_node_id: str
    to_port_id: Optional[str] = None


class CloneNodeRequest(BaseModel):
    node_id: str


class InteractionResponse(BaseModel):
    node: Optional[NodeModel] = None
    queued: List[MutationResponse]
    applied: List[MutationResponse]
