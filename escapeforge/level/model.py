"""Room document data models.

This module defines the dataclasses for a Level: the Room layout, its
interactive objects, and the Condition/Effect clauses that gate them.
Documents use camelCase keys; attributes are snake_case.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Literal

FlagSet = Dict[str, bool]

Action = Literal["finish", "fail", "next", "none"]
ACTIONS = ("finish", "fail", "next", "none")

ArtStyle = Literal["comic", "drawing", "photorealistic"]
ART_STYLES = ("comic", "drawing", "photorealistic")


@dataclass
class Condition:
    """A conjunction over flags.

    Examples:
        {"requiredTrue": ["hasKey"]}
        {"requiredTrue": ["drawerOpen"], "requiredFalse": ["keyTaken"]}
    """
    required_true: List[str] = field(default_factory=list)
    required_false: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Condition"]:
        if data is None:
            return None
        return cls(
            required_true=list(data.get("requiredTrue") or []),
            required_false=list(data.get("requiredFalse") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.required_true:
            out["requiredTrue"] = list(self.required_true)
        if self.required_false:
            out["requiredFalse"] = list(self.required_false)
        return out


@dataclass
class Effect:
    """Flag changes applied when an option is selected."""
    set_true: List[str] = field(default_factory=list)
    set_false: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Effect"]:
        if data is None:
            return None
        return cls(
            set_true=list(data.get("setTrue") or []),
            set_false=list(data.get("setFalse") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.set_true:
            out["setTrue"] = list(self.set_true)
        if self.set_false:
            out["setFalse"] = list(self.set_false)
        return out


@dataclass
class TextVariant:
    content: str
    condition: Optional[Condition] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextVariant":
        return cls(content=data["content"], condition=Condition.from_dict(data.get("condition")))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"content": self.content}
        if self.condition is not None:
            out["condition"] = self.condition.to_dict()
        return out


@dataclass
class Option:
    """A choice offered inside an object's interaction."""
    label: str
    action: Action = "none"
    effects: Optional[Effect] = None
    condition: Optional[Condition] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        return cls(
            label=data["label"],
            action=data.get("action", "none"),
            effects=Effect.from_dict(data.get("effects")),
            condition=Condition.from_dict(data.get("condition")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"label": self.label, "action": self.action}
        if self.effects is not None:
            out["effects"] = self.effects.to_dict()
        if self.condition is not None:
            out["condition"] = self.condition.to_dict()
        return out


@dataclass
class Area:
    """Hotspot rectangle in percentage space (0-100)."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Area":
        return cls(x=data["x"], y=data["y"], width=data["width"], height=data["height"])

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class InteractiveObject:
    id: str
    area: Area
    text: List[TextVariant]
    options: List[Option]
    image: Optional[str] = None
    video: Optional[str] = None
    visible_condition: Optional[Condition] = None

    @property
    def media(self) -> Optional[str]:
        """Media reference shown in the interaction; video wins over image."""
        return self.video or self.image

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InteractiveObject":
        return cls(
            id=data["id"],
            area=Area.from_dict(data["area"]),
            text=[TextVariant.from_dict(t) for t in data["text"]],
            options=[Option.from_dict(o) for o in data["options"]],
            image=data.get("image"),
            video=data.get("video"),
            visible_condition=Condition.from_dict(data.get("visibleCondition")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "area": self.area.to_dict(),
            "text": [t.to_dict() for t in self.text],
            "options": [o.to_dict() for o in self.options],
        }
        if self.image is not None:
            out["image"] = self.image
        if self.video is not None:
            out["video"] = self.video
        if self.visible_condition is not None:
            out["visibleCondition"] = self.visible_condition.to_dict()
        return out


@dataclass
class Room:
    background_image: str
    objects: List[InteractiveObject]

    def get_object(self, object_id: str) -> Optional[InteractiveObject]:
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        return cls(
            background_image=data.get("backgroundImage", ""),
            objects=[InteractiveObject.from_dict(o) for o in data["objects"]],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backgroundImage": self.background_image,
            "objects": [o.to_dict() for o in self.objects],
        }


@dataclass
class Level:
    """A validated, persistable room plus its starting flags."""
    id: str
    room: Room
    initial_state: FlagSet = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Level":
        """Build a Level from an already validated document.

        Use ``escapeforge.level.validator.validate_level`` for untrusted input.
        """
        return cls(
            id=data["id"],
            room=Room.from_dict(data["room"]),
            initial_state=dict(data.get("initialState", {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "room": self.room.to_dict(),
            "initialState": dict(self.initial_state),
        }
