"""Relevance ranking for model search results.

Substring hits come first (earlier match, then shorter ID wins),
followed by fuzzy hits -- IDs that contain the query's characters in
order -- ordered by similarity score.  IDs matching neither are dropped.
"""

from __future__ import annotations

from rapidfuzz import fuzz, process
from rapidfuzz.distance import LCSseq


def rank_model_ids(model_ids: list[str], query: str) -> list[str]:
    """Sort *model_ids* by relevance to *query*."""
    if not query:
        return list(model_ids)

    query = query.lower()
    exact_matches: list[str] = []
    fuzzy_candidates: list[str] = []

    for model_id in model_ids:
        model_lower = model_id.lower()
        if query in model_lower:
            exact_matches.append(model_id)
        elif LCSseq.similarity(query, model_lower) == len(query):
            # every query character appears in order
            fuzzy_candidates.append(model_id)

    exact_matches.sort(key=lambda m: (m.lower().index(query), len(m)))

    fuzzy_matches = process.extract(
        query,
        fuzzy_candidates,
        scorer=fuzz.ratio,
        processor=str.lower,
        limit=None,
    )
    return exact_matches + [model_id for model_id, _, _ in fuzzy_matches]
