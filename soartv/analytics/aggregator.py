from __future__ import annotations

from collections import Counter
from typing import Any


def _average(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    requests = [e for e in events if e["type"] == "recommendations"]
    total = len(requests)

    empty = sum(1 for r in requests if not r.get("users_returned") and not r.get("projects_returned"))

    genre_counter: Counter[str] = Counter()
    for r in requests:
        for g in r.get("genres", []) or []:
            genre_counter[g] += 1
    top_genres = [{"name": n, "count": c} for n, c in genre_counter.most_common(10)]

    row_requests = [e for e in events if e["type"] == "recommended_row"]

    return {
        "total_requests": total,
        "avg_response_time_ms": _average([r["response_time_ms"] for r in requests if "response_time_ms" in r]),
        "avg_users_returned": _average([r.get("users_returned", 0) for r in requests]),
        "avg_projects_returned": _average([r.get("projects_returned", 0) for r in requests]),
        "empty_rate": round(empty / total * 100, 1) if total else 0.0,
        "top_genres": top_genres,
        "recommended_row_requests": len(row_requests),
    }
