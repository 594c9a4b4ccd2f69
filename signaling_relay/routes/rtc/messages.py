"""Typed decoding of inbound signaling frames.

Every frame a client sends looks like ``{"event": "<tag>", "data": {...}}``.
``decode_message`` turns it into exactly one of the variants below so the
router can dispatch on the type instead of poking at raw dicts:

- ``Join``
- ``LocalDescription`` / ``RemoteDescription``
- ``IceCandidate`` / ``IceCandidateReply``
- ``Unknown`` for tags this relay does not know about
- ``Malformed`` for anything that cannot be decoded
"""

import json
from typing import Any, ClassVar, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError


class Join(BaseModel):
    event: ClassVar[str] = "join"

    room_id: StrictStr = Field(alias="roomId")


class _Description(BaseModel):
    description: StrictStr

    def payload(self) -> Dict[str, str]:
        return {"description": self.description}


class _Candidate(BaseModel):
    candidate: StrictStr

    def payload(self) -> Dict[str, str]:
        return {"candidate": self.candidate}


class LocalDescription(_Description):
    event: ClassVar[str] = "localDescription"


class RemoteDescription(_Description):
    event: ClassVar[str] = "remoteDescription"


class IceCandidate(_Candidate):
    event: ClassVar[str] = "iceCandidate"


class IceCandidateReply(_Candidate):
    event: ClassVar[str] = "iceCandidateReply"


class Unknown(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: str


class Malformed(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str


NegotiationMessage = Union[LocalDescription, RemoteDescription, IceCandidate, IceCandidateReply]
SignalMessage = Union[Join, NegotiationMessage, Unknown, Malformed]

EVENT_TYPES: Dict[str, Type[BaseModel]] = {
    cls.event: cls
    for cls in (Join, LocalDescription, RemoteDescription, IceCandidate, IceCandidateReply)
}


def decode_message(raw: Any) -> SignalMessage:
    if not isinstance(raw, dict):
        return Malformed(reason="message is not a JSON object")

    event = raw.get("event")
    if event is None:
        return Malformed(reason="missing event")
    if not isinstance(event, str):
        return Malformed(reason=f"event must be a string, got {type(event).__name__}")

    message_cls = EVENT_TYPES.get(event)
    if message_cls is None:
        return Unknown(event=event)

    data = raw.get("data")
    if not isinstance(data, dict):
        return Malformed(reason=f"{event}: data must be a JSON object")

    try:
        return message_cls.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        return Malformed(reason=f"{event}: invalid or missing {fields}")


def decode_frame(text: Optional[str]) -> SignalMessage:
    """Parse a raw frame and decode it; ``None`` stands for a binary frame"""
    if text is None:
        return Malformed(reason="expected a text frame")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        return Malformed(reason="invalid JSON")
    except RecursionError:
        return Malformed(reason="JSON nested too deeply")
    return decode_message(raw)
