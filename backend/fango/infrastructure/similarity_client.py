"""Similarity Client — httpx client for the external vector-similarity server.

Invariants:
    - Every recommend request carries a short timeout (seconds-scale); PDF indexing
      gets its own, longer one
    - Non-2xx, timeouts, connection errors, and malformed bodies all raise
      OracleUnavailableError(oracle="similarity")
    - Returned candidates are NOT validated here (ranking chain re-validates)

Design Decisions:
    - One shared httpx.AsyncClient per process, opened/closed by the runtime lifecycle
    - Wire names follow the similarity server (page_id, rating, exclude_rated, page_ids)
"""

import json
import logging

import httpx

from fango.core.errors import OracleUnavailableError
from fango.core.oracle_protocols import RatingSignal, ScoredCandidate

logger = logging.getLogger(__name__)

_ORACLE = "similarity"
_RECOMMEND_PATH = "/api/v1/recommend"
_PROCESS_PDF_PATH = "/api/v1/pdf/process"

# The similarity server sits behind an ngrok tunnel in some deployments
_DEFAULT_HEADERS = {"ngrok-skip-browser-warning": "true"}


class HttpSimilarityOracle:
    """SimilarityOracle and DocumentIndexer over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
        index_timeout_seconds: float = 300.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.index_timeout_seconds = index_timeout_seconds
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers=_DEFAULT_HEADERS,
        )

    async def recommend(
        self,
        *,
        subject_id: str,
        ratings: list[RatingSignal],
        limit: int,
        exclude_ids: list[str],
    ) -> list[ScoredCandidate]:
        payload = {
            "project_id": subject_id,
            "ratings": [
                {"page_id": r.house_id, "rating": r.rating.value}
                for r in ratings
            ],
            "limit": limit,
            "exclude_rated": True,
            "exclude_ids": exclude_ids,
        }
        logger.info(
            f"Calling similarity recommend with {len(ratings)} ratings",
            extra={"project_id": subject_id},
        )
        body = await self._post(_RECOMMEND_PATH, json=payload)
        return _parse_recommendations(body)

    async def index_document(
        self, *, subject_id: str, filename: str, data: bytes,
    ) -> list[str]:
        """Embed a PDF; the server answers with one page id per page, in order."""
        logger.info(
            f"Indexing {filename} ({len(data)} bytes) on the similarity server",
            extra={"project_id": subject_id},
        )
        body = await self._post(
            _PROCESS_PDF_PATH,
            files={"file": (filename, data, "application/pdf")},
            data={
                "metadata": json.dumps({"project_id": subject_id}),
                "build_immediately": "true",
            },
            timeout=self.index_timeout_seconds,
        )
        return _parse_page_ids(body)

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, **kwargs) -> object:
        try:
            response = await self._client.post(path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise OracleUnavailableError(_ORACLE, "timeout", str(e))
        except httpx.HTTPStatusError as e:
            raise OracleUnavailableError(
                _ORACLE, "http_error",
                f"{e.response.status_code}: {e.response.text[:200]}",
            )
        except httpx.HTTPError as e:
            raise OracleUnavailableError(_ORACLE, "connection_error", str(e))
        except ValueError as e:
            raise OracleUnavailableError(_ORACLE, "malformed_response", str(e))


def _parse_recommendations(body: object) -> list[ScoredCandidate]:
    """Extract (page_id, score) pairs; any structural surprise is a failure."""
    if not isinstance(body, dict):
        raise OracleUnavailableError(_ORACLE, "malformed_response", "body is not an object")
    recs = body.get("recommendations") or []
    if not isinstance(recs, list):
        raise OracleUnavailableError(
            _ORACLE, "malformed_response", "recommendations is not a list",
        )
    candidates = []
    for rec in recs:
        if not isinstance(rec, dict) or not rec.get("page_id"):
            continue
        score = rec.get("score")
        candidates.append(ScoredCandidate(
            house_id=str(rec["page_id"]),
            score=float(score) if isinstance(score, (int, float)) else None,
        ))
    return candidates


def _parse_page_ids(body: object) -> list[str]:
    page_ids = body.get("page_ids") if isinstance(body, dict) else None
    if not isinstance(page_ids, list) or not all(
        isinstance(p, str) and p.strip() for p in page_ids
    ):
        raise OracleUnavailableError(
            _ORACLE, "malformed_response", "page_ids is not a list of ids",
        )
    return [p.strip() for p in page_ids]
