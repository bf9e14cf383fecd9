"""Candidate exclusion sets derived from request and group records."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

logger = logging.getLogger("recovery_match")

CONNECTED_REQUEST_STATUSES = {"matched", "approved"}
ACTIVE_GROUP_STATUSES = {"active", "forming"}
GROUP_MEMBER_KEYS = ("applicant_1_id", "applicant_2_id", "peer_support_id", "landlord_id")


def _is_roommate_request(request: Mapping[str, Any]) -> bool:
    # Untyped requests predate the request_type column and are roommate requests.
    return request.get("request_type") in (None, "", "roommate")


def _id(value: Any) -> str | None:
    return None if value is None else str(value)


def excluded_user_ids(
    subject_id: str,
    requests: Iterable[Mapping[str, Any]] = (),
    groups: Iterable[Mapping[str, Any]] = (),
) -> set[str]:
    """Users the subject is already connected with.

    That is the other party of every matched/approved roommate request the
    subject is part of, and every other member of an active or forming match
    group the subject belongs to.
    """
    excluded: set[str] = set()

    for request in requests:
        if not _is_roommate_request(request):
            continue
        requester, target = _id(request.get("requester_id")), _id(request.get("target_id"))
        if subject_id not in (requester, target):
            continue
        if request.get("status") in CONNECTED_REQUEST_STATUSES:
            other = target if requester == subject_id else requester
            if other:
                excluded.add(other)

    for group in groups:
        if group.get("status") not in ACTIVE_GROUP_STATUSES:
            continue
        members = [_id(group.get(key)) for key in GROUP_MEMBER_KEYS]
        if subject_id not in members:
            continue
        excluded.update(m for m in members if m and m != subject_id)

    logger.debug(f"{subject_id}: {len(excluded)} excluded users")
    return excluded


def sent_request_ids(subject_id: str, requests: Iterable[Mapping[str, Any]] = ()) -> set[str]:
    """Targets of the subject's pending roommate requests."""
    return {
        str(r["target_id"])
        for r in requests
        if _is_roommate_request(r)
        and _id(r.get("requester_id")) == subject_id
        and r.get("status") == "pending"
        and r.get("target_id") is not None
    }
