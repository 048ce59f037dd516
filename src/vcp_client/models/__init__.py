"""
Data Models
===========

Pydantic models for the VCP sink client.

Models:
    Frame:
        - RawFrame: Minimal parsed frame (type tag + opaque fields)

    Messages:
        - APIType, ClientRole: Protocol vocabularies
        - HeadPose, FullBody, Handshake: Known message shapes
        - EulerRotation, SpacialPosition, VCPQuaternion, Joint: Value types
"""

from vcp_client.models.frame import RawFrame
from vcp_client.models.api import (
    ANY_TYPE,
    APIBase,
    APIType,
    ClientRole,
    EulerRotation,
    FullBody,
    Handshake,
    HeadPose,
    Joint,
    SpacialPosition,
    VCPQuaternion,
)

__all__ = [
    # Frame
    "RawFrame",
    # Vocabulary
    "ANY_TYPE",
    "APIType",
    "ClientRole",
    # Messages
    "APIBase",
    "HeadPose",
    "FullBody",
    "Handshake",
    # Values
    "EulerRotation",
    "SpacialPosition",
    "VCPQuaternion",
    "Joint",
]
