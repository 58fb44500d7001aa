from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"


class InteractionState(BaseModel):
    phase: Phase = Phase.IDLE
    adding_variant_id: Optional[str] = None
    error_visible: bool = False

    model_config = {"frozen": True}


class CartLineChange(BaseModel):
    action: Literal["addLine"] = "addLine"
    variant_id: str
    quantity: int = 1
    model_config = {"frozen": True}


class MutationResult(BaseModel):
    outcome: Literal["success", "error"]
    message: Optional[str] = None
    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.outcome == "success"
