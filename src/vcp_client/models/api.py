"""
VCP Message Schemas
===================

Pydantic models for the known Virtual Communication Protocol messages.

The dispatch engine itself only needs the ``type`` tag (see RawFrame);
these models give processors a typed view of the payload.

Wire Examples:
    {"type": "handshake", "role": "sink"}
    {"type": "headPoseAPI",
     "rotation": {"pitch": 0.1, "roll": 0.0, "yaw": -0.2},
     "position": {"x": 0.0, "y": 1.6, "z": 0.0}}
    {"type": "fullBodyAPI",
     "joints": {"Hips": {"rotation": {"x": 0, "y": 0, "z": 0, "w": 1}}},
     "hipPosition": {"x": 0.0, "y": 0.9, "z": 0.0}}
"""

from enum import Enum
from typing import ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class APIType(str, Enum):
    """
    Known message type identifiers.

    The vocabulary is open: frames with any other string type are still
    routed, to whichever processors registered that string.
    """

    HEAD_POSE = "headPoseAPI"
    FULL_BODY = "fullBodyAPI"
    CONTROL = "controlAPI"
    INTERACTION = "interactionAPI"
    BUST = "bustAPI"
    HANDSHAKE = "handshake"


# Sentinel type for processors that want every frame regardless of tag.
ANY_TYPE = "*"


class ClientRole(str, Enum):
    """Role declared by a client in the handshake."""

    SINK = "sink"
    SOURCE = "source"
    UNDEFINED = "undefined"
    CONTROL = "control"
    ALL = "all"


class EulerRotation(BaseModel):
    """Euler angle rotation."""

    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0


class SpacialPosition(BaseModel):
    """XYZ spatial position."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class VCPQuaternion(BaseModel):
    """Quaternion rotation."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0


class Joint(BaseModel):
    """One skeletal joint of a FullBody message."""

    rotation: VCPQuaternion = Field(default_factory=VCPQuaternion)
    position: Optional[SpacialPosition] = None


class APIBase(BaseModel):
    """
    Base class of VCP messages.

    Subclasses pin ``api_type`` and default ``type`` to it.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_type: ClassVar[APIType]

    type: str
    sender: Optional[str] = None

    @classmethod
    def get_api_type(cls) -> APIType:
        return cls.api_type


class HeadPose(APIBase):
    """Head pose (rotation + position)."""

    api_type: ClassVar[APIType] = APIType.HEAD_POSE

    type: str = APIType.HEAD_POSE.value
    rotation: EulerRotation = Field(default_factory=EulerRotation)
    position: SpacialPosition = Field(default_factory=SpacialPosition)


class FullBody(APIBase):
    """Full body skeletal pose keyed by joint name."""

    api_type: ClassVar[APIType] = APIType.FULL_BODY

    type: str = APIType.FULL_BODY.value
    joints: Dict[str, Joint] = Field(default_factory=dict)
    hip_position: SpacialPosition = Field(
        default_factory=SpacialPosition,
        alias="hipPosition",
    )


class Handshake(APIBase):
    """
    Handshake sent by a client right after connecting.

    Example:
        Handshake(role=ClientRole.SINK).to_wire()
        # '{"type":"handshake","role":"sink"}'
    """

    api_type: ClassVar[APIType] = APIType.HANDSHAKE

    type: str = APIType.HANDSHAKE.value
    role: ClientRole = ClientRole.UNDEFINED

    def to_wire(self) -> str:
        """Serialize to the wire form (no null sender)."""
        return self.model_dump_json(include={"type", "role"})
