"""Intake for the submission-time categorizer's free-form output.

The categorizer only ever proposes inputs (type, urgency, flag, confidence).
Classification is always re-derived from the merged signal.
"""

import json
import math
import re

import structlog

from pulse.signals.schemas import SIGNAL_TYPES, URGENCIES, Signal

logger = structlog.get_logger()

PROPOSAL_FIELDS = ("signal_type", "urgency", "flag_reason", "confidence")
CAMEL_CASE_KEYS = {"signalType": "signal_type", "flagReason": "flag_reason"}

_CODE_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)
_BARE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def parse_proposal(raw: dict | str | None) -> dict:
    """Extract a JSON object from categorizer output (3-tier parsing)."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        return {}

    # Direct parse
    try:
        parsed = json.loads(raw)
        return parsed if isinstance(parsed, dict) else {}
    except json.JSONDecodeError:
        pass

    # Markdown code block
    code_match = _CODE_BLOCK.search(raw)
    if code_match:
        try:
            parsed = json.loads(code_match.group(1).strip())
            return parsed if isinstance(parsed, dict) else {}
        except json.JSONDecodeError:
            pass

    # Bare JSON object
    obj_match = _BARE_OBJECT.search(raw)
    if obj_match:
        try:
            parsed = json.loads(obj_match.group())
            return parsed if isinstance(parsed, dict) else {}
        except json.JSONDecodeError:
            pass

    logger.warning("proposal_parse_failed", raw_output=raw[:500])
    return {}


def _clean_proposal(proposal: dict) -> dict:
    """Keep only proposal fields that are valid for their domain."""
    cleaned: dict = {}
    # The categorizer tool schema speaks camelCase
    proposal = {CAMEL_CASE_KEYS.get(k, k): v for k, v in proposal.items()}

    signal_type = proposal.get("signal_type")
    if isinstance(signal_type, str) and signal_type.strip().lower() in SIGNAL_TYPES:
        cleaned["signal_type"] = signal_type.strip().lower()

    urgency = proposal.get("urgency")
    if isinstance(urgency, str) and urgency.strip().lower() in URGENCIES:
        cleaned["urgency"] = urgency.strip().lower()

    if "flag_reason" in proposal:
        flag = proposal["flag_reason"]
        if flag is None:
            cleaned["flag_reason"] = None
        elif isinstance(flag, str):
            cleaned["flag_reason"] = flag.strip() or None

    confidence = proposal.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool) and not math.isnan(confidence):
        cleaned["confidence"] = min(100.0, max(0.0, float(confidence)))

    dropped = [k for k in PROPOSAL_FIELDS if k in proposal and k not in cleaned]
    if dropped:
        logger.info("proposal_fields_dropped", fields=dropped)
    return cleaned


def apply_proposal(signal: Signal, raw: dict | str | None) -> tuple[Signal, list[str]]:
    """Merge a categorizer proposal into a copy of ``signal``.

    Returns the merged signal and the names of the fields that were taken.
    """
    cleaned = _clean_proposal(parse_proposal(raw))
    if not cleaned:
        return signal, []
    merged = signal.model_copy(update=cleaned)
    logger.info("proposal_applied", signal_id=signal.id, fields=sorted(cleaned))
    return merged, sorted(cleaned)
