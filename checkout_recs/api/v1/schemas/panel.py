# api/v1/schemas/panel.py
from pydantic import BaseModel, Field
from typing import List, Optional

from checkout_recs.domain.models.product import CartLine, DisplayRecord, UINode
from checkout_recs.domain.models.state import InteractionState, MutationResult

class CartLineIn(BaseModel):
    merchandise_id: str
    product_id: Optional[str] = None

    def to_domain(self) -> CartLine:
        return CartLine(merchandise_id=self.merchandise_id, product_id=self.product_id)

class CartLinesIn(BaseModel):
    lines: List[CartLineIn] = Field(default_factory=list)

class AddToCartIn(BaseModel):
    variant_id: str

class PanelViewOut(BaseModel):
    cart_token: str
    version: str
    trigger_product_id: Optional[str] = None
    state: InteractionState
    offers: List[DisplayRecord]
    tree: List[UINode]

class AddToCartOut(BaseModel):
    result: Optional[MutationResult] = None   # None: same variant already being added
    view: PanelViewOut
