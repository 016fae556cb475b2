"""
New-order wizard: service -> upload -> delivery -> summary.

Forward moves are gated on the validity of the current step; moving back is
always possible except from the first step. The draft is kept for the whole
life of the wizard so going back and forth never loses input.
"""

from typing import Any, Dict, Optional

from pricing import quote
from schemas import OrderDraft, OrderFile, Quote, Service

STEPS = ("service", "upload", "delivery", "summary")


def step_valid(step: str, draft: OrderDraft) -> bool:
    if step == "service":
        return draft.service_id != 0 and draft.complexity != ""
    if step == "upload":
        return (
            draft.order_name.strip() != ""
            and len(draft.files) > 0
            and draft.instructions.strip() != ""
        )
    if step == "delivery":
        # delivery_time always has a default
        return True
    return False


class OrderWizard:
    def __init__(self, draft: Optional[OrderDraft] = None):
        self.draft = draft or OrderDraft()
        self.step = STEPS[0]

    @property
    def step_index(self) -> int:
        return STEPS.index(self.step)

    def update(self, **changes) -> OrderDraft:
        data = self.draft.model_dump()
        data.update(changes)
        self.draft = OrderDraft.model_validate(data)
        return self.draft

    def add_file(self, path: str, image_count: int = 1) -> OrderDraft:
        files = list(self.draft.files) + [OrderFile(path=path, image_count=image_count)]
        return self.update(files=[f.model_dump() for f in files])

    def remove_file(self, index: int) -> OrderDraft:
        files = [f.model_dump() for i, f in enumerate(self.draft.files) if i != index]
        return self.update(files=files)

    def validity(self) -> Dict[str, bool]:
        return {
            "service": step_valid("service", self.draft),
            "upload": step_valid("upload", self.draft),
        }

    def can_advance(self) -> bool:
        if self.step == STEPS[-1]:
            return False
        return step_valid(self.step, self.draft)

    def advance(self) -> bool:
        if not self.can_advance():
            return False
        self.step = STEPS[self.step_index + 1]
        return True

    def can_retreat(self) -> bool:
        return self.step_index > 0

    def retreat(self) -> bool:
        if not self.can_retreat():
            return False
        self.step = STEPS[self.step_index - 1]
        return True

    def quote(self, service: Optional[Service]) -> Quote:
        d = self.draft
        return quote(service, d.complexity, d.delivery_time, d.files)

    def payload(self) -> Dict[str, Any]:
        """Body for POST /api/orders, built from the summary step."""
        return self.draft.model_dump()
