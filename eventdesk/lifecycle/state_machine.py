"""Inquiry lifecycle state machine.

Provides declarative stage transitions for an inquiry on its way to
becoming an event, with callbacks that keep the model's `stage` column in
step with the machine.
"""

from typing import TYPE_CHECKING

import structlog
from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from eventdesk.models.inquiry import InquiryStage

if TYPE_CHECKING:
    from eventdesk.models.inquiry import Inquiry

logger = structlog.get_logger()


class InquiryStateMachine(StateMachine):
    """State machine for inquiry lifecycle management.

    States:
    - open: tasks still outstanding (progress < 100)
    - promoting: every task done; event creation, client update and inquiry
      deletion are under way. Persisted so an interrupted promotion can be
      found and finished later.
    - promoted: converted into an event and deleted (final)

    Transitions:
    - begin_promotion: open -> promoting
    - complete_promotion: promoting -> promoted

    There is no way back to open once promotion has begun.
    """

    open = State(initial=True, value=InquiryStage.OPEN)
    promoting = State(value=InquiryStage.PROMOTING)
    promoted = State(final=True, value=InquiryStage.PROMOTED)

    begin_promotion = open.to(promoting)
    complete_promotion = promoting.to(promoted)

    def __init__(self, inquiry: "Inquiry") -> None:
        """Initialize state machine from the inquiry's persisted stage.

        Args:
            inquiry: Inquiry model instance to manage
        """
        self.inquiry = inquiry
        super().__init__(start_value=inquiry.stage or InquiryStage.OPEN)

    def on_begin_promotion(self) -> None:
        """Called when the last outstanding task is completed."""
        self.inquiry.stage = InquiryStage.PROMOTING
        logger.info(
            "inquiry_promotion_started",
            inquiry_id=self.inquiry.id,
            client_id=self.inquiry.client_id,
        )

    def on_complete_promotion(self) -> None:
        """Called once the inquiry row has been deleted."""
        self.inquiry.stage = InquiryStage.PROMOTED
        logger.info(
            "inquiry_promoted",
            inquiry_id=self.inquiry.id,
            client_id=self.inquiry.client_id,
        )


__all__ = [
    "InquiryStateMachine",
    "TransitionNotAllowed",
]
