"""Mixed-box intake session: sequential, forward-only collection of box contents.

The session is an immutable value. Each transition returns a new session, so a
box that has been confirmed can never be changed by a later step. State flow:

    AWAITING_BOX_INPUT(0) -> ... -> AWAITING_BOX_INPUT(n-1) -> COMPLETED
    AWAITING_BOX_INPUT(i) -> CANCELLED
"""

from typing import Optional

from stock_intake.config import DEFAULT_OPERATOR
from stock_intake.errors import EmptyBoxError, SessionStateError
from stock_intake.intake.parser import parse_line_items
from stock_intake.models.intake import CollectedBox, IntakeMetadata, IntakeSession, SessionState
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.intake.session")


def start_session(
    total_boxes_planned: int,
    shared_metadata: IntakeMetadata,
    operator: Optional[str] = None,
) -> IntakeSession:
    """Open a session awaiting input for box 0."""
    if total_boxes_planned < 1:
        raise ValueError(f"Mixed-box count must be at least 1, got {total_boxes_planned}")
    session = IntakeSession(
        total_boxes_planned=total_boxes_planned,
        shared_metadata=shared_metadata,
        operator=operator or DEFAULT_OPERATOR,
    )
    logger.info(
        "intake_session.started",
        total_boxes_planned=total_boxes_planned,
        country=shared_metadata.country,
        packer=shared_metadata.packer,
    )
    return session


def commit_current_box(session: IntakeSession, raw_text: str) -> IntakeSession:
    """Parse raw_text as the contents of the current box and advance.

    Raises EmptyBoxError (session unchanged) when no valid line was entered.
    Returns a session awaiting the next box, or a COMPLETED session after the
    last planned box.
    """
    _require_awaiting(session, "commit a box")
    index = session.current_box_index
    lines = parse_line_items(raw_text)
    if not lines:
        logger.info("intake_session.empty_box", box_index=index)
        raise EmptyBoxError(index)

    collected = session.collected_boxes + (CollectedBox(box_index=index, lines=tuple(lines)),)
    if index + 1 < session.total_boxes_planned:
        updated = session.model_copy(update={"collected_boxes": collected, "current_box_index": index + 1})
        logger.info("intake_session.box_committed", box_index=index, line_count=len(lines), next_box_index=index + 1)
        return updated

    updated = session.model_copy(
        update={
            "collected_boxes": collected,
            "current_box_index": session.total_boxes_planned,
            "state": SessionState.COMPLETED,
        }
    )
    logger.info(
        "intake_session.completed",
        box_count=len(collected),
        line_count=updated.collected_line_count,
    )
    return updated


def cancel_session(session: IntakeSession) -> IntakeSession:
    """Discard everything collected. No records are created and nothing external is called."""
    _require_awaiting(session, "cancel")
    logger.info(
        "intake_session.cancelled",
        box_index=session.current_box_index,
        discarded_boxes=len(session.collected_boxes),
    )
    return session.model_copy(update={"collected_boxes": (), "state": SessionState.CANCELLED})


def _require_awaiting(session: IntakeSession, action: str) -> None:
    if not session.is_awaiting_input:
        raise SessionStateError(f"Cannot {action}: session is {session.state.value}")
