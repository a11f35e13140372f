"""
ranked_turbo.errors — Custom exception classes
==============================================

Exception hierarchy for the settlement pipeline. Every error keeps the
values needed to diagnose it (URL, identity, raw payload, winning team)
as attributes, and the ones reported to the operator render a readable
block through ``format_error_log``.

None of these errors is allowed to stop a match: the store client converts
transport failures into its fallback policy, the signal boundary drops
invalid signals, and the detector logs settlement failures.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class RankedTurboError(Exception):
    """Base exception for all ranked_turbo errors."""
    pass


class StoreUnavailableError(RankedTurboError):
    """Raised when the rating store cannot be reached or answers non-2xx."""

    def __init__(
        self,
        method: str,
        url: str,
        status_code: Optional[int] = None,
        reason: str = "",
    ):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason = reason
        detail = f"status {status_code}" if status_code is not None else reason
        super().__init__(f"{method} {url} failed: {detail}")


class MalformedRatingError(RankedTurboError):
    """Raised when the store returns a body that is not a rating number."""

    def __init__(self, identity: str, body: str):
        self.identity = identity
        self.body = body
        super().__init__(f"Rating for '{identity}' is not a number: {body!r}")


class InvalidSignalError(RankedTurboError):
    """Raised when an inbound engine event fails boundary validation."""

    def __init__(
        self,
        event: str,
        payload: Dict[str, Any],
        validation_errors: List[str],
    ):
        self.event = event
        self.payload = payload
        self.validation_errors = validation_errors
        super().__init__(f"Signal '{event}' rejected: {'; '.join(validation_errors)}")

    def format_error_log(self) -> str:
        return render_report(
            "INVALID_SIGNAL",
            context={"event": self.event},
            payload=self.payload,
            problems=self.validation_errors,
        )


class SettlementError(RankedTurboError):
    """Raised (for logging) when the deferred settlement callback fails."""

    def __init__(self, winning_team: int, cause: BaseException):
        self.winning_team = winning_team
        self.cause = cause
        super().__init__(
            f"Settlement for team {winning_team} failed: "
            f"{cause.__class__.__name__}: {cause}"
        )

    def format_error_log(self) -> str:
        return render_report(
            "SETTLEMENT_FAILURE",
            context={"stage": "finalize", "winning_team": self.winning_team},
            payload={"winning_team": self.winning_team},
            problems=[f"{self.cause.__class__.__name__}: {self.cause}"],
        )


def render_report(
    kind: str,
    context: Dict[str, Any],
    payload: Dict[str, Any],
    problems: List[str],
) -> str:
    """
    Render an operator-facing error report.

    The header states that the match continued.
    """
    rule = "-" * 60
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")

    out = [
        "",
        rule,
        f"[ranked_turbo] {kind} (match continues)",
        rule,
        f"  at      {stamp}",
    ]
    out.extend(f"  {key:<7} {value}" for key, value in context.items())

    out.append("  payload:")
    out.append(_payload_lines(payload))

    if problems:
        out.append("  problems:")
        out.extend(f"    - {problem}" for problem in problems)

    out.append(rule)
    return "\n".join(out) + "\n"


def _payload_lines(payload: Dict[str, Any]) -> str:
    try:
        text = json.dumps(payload, indent=2, sort_keys=True, default=str)
    except (TypeError, ValueError):
        text = repr(payload)
    return "\n".join(f"    {line}" for line in text.splitlines())
