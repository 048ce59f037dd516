"""
Frame Data Model
=================

Minimal decoded unit of the Virtual Communication Protocol.

Every inbound wire message is one JSON object carrying a ``type`` tag.
RawFrame validates exactly that and keeps every other field as-is.

Design Rules:
    - Only the presence of a string ``type`` is validated
    - Additional fields are preserved untouched
    - Frames are immutable once parsed (shared read-only by all processors)
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class RawFrame(BaseModel):
    """
    A parsed inbound frame.

    Attributes:
        type: Message type identifier (e.g. "headPoseAPI")

    Any other field of the JSON object is available as an attribute
    or through ``payload``.

    Example:
        frame = RawFrame.parse_text('{"type": "headPoseAPI", "sender": "cam0"}')
        frame.type            # "headPoseAPI"
        frame.get("sender")   # "cam0"
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = Field(..., description="Message type discriminator")

    @classmethod
    def parse_text(cls, raw: str) -> "RawFrame":
        """
        Parse one wire message.

        Raises:
            pydantic.ValidationError: Invalid JSON, not an object,
                or missing/non-string ``type``
        """
        return cls.model_validate_json(raw)

    @property
    def payload(self) -> Dict[str, Any]:
        """Fields other than ``type``."""
        return dict(self.model_extra or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an opaque field by name."""
        if key == "type":
            return self.type
        return (self.model_extra or {}).get(key, default)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full payload."""
        return f"RawFrame(type={self.type!r}, fields={sorted(self.payload)})"
