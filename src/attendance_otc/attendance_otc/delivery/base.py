from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class CodeDelivery(Protocol):
    """Out-of-band channel that hands a code to the member.

    Best effort from the core's point of view; implementations raise
    DeliveryFailedError when the hand-off fails.
    """

    def deliver(self, address: str, code: str, member_name: str, expiry_minutes: int) -> None:
        raise NotImplementedError


class LoggingCodeDelivery(CodeDelivery):
    """Development channel: writes the code to the log instead of sending it."""

    def deliver(self, address: str, code: str, member_name: str, expiry_minutes: int) -> None:
        logger.info(
            "[dev delivery] to=%s name=%s code=%s valid_for=%smin",
            address,
            member_name,
            code,
            expiry_minutes,
        )
