"""
Round state provider.

Fetches the current mining round id and lifecycle status from the public ORE
state API. Any failure here means "do not proceed this tick".
"""
import logging
from typing import Any, Dict, Optional

import httpx

from executor.errors import MalformedResponse, UpstreamUnavailable
from protocol.models import RoundSnapshot, RoundStatus

logger = logging.getLogger(__name__)


class RoundStateService:
    """Reads the current round snapshot from the round state API."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            url: Full URL of the state endpoint
            timeout: Request timeout in seconds
            client: Shared AsyncClient; a short-lived one is used per call if None
        """
        self.url = url
        self.timeout = timeout
        self.client = client

    async def fetch_round(self) -> RoundSnapshot:
        """
        Fetch the current round snapshot.

        Raises:
            UpstreamUnavailable: Transport failure or non-success status
            MalformedResponse: Round id or status missing from the response
        """
        try:
            if self.client is not None:
                response = await self.client.get(self.url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(self.url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Round state request failed: {e}") from e

        if not response.is_success:
            raise UpstreamUnavailable(
                f"Round state API returned status {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(f"Round state response is not JSON: {e}") from e

        snapshot = parse_round_state(data)
        logger.debug(f"Round {snapshot.round_id} status={snapshot.status.value}")
        return snapshot


def parse_round_state(data: Dict[str, Any]) -> RoundSnapshot:
    """
    Extract a RoundSnapshot from a state API document.

    The round object is `round`, or the first frame's `liveData`. The id comes
    from the round's `roundId`, else the top-level `currentRoundId`.
    """
    if not isinstance(data, dict):
        raise MalformedResponse("Round state response is not an object")

    round_data = data.get("round")
    if not round_data:
        frames = data.get("frames") or []
        if frames and isinstance(frames[0], dict):
            round_data = frames[0].get("liveData")
    if not isinstance(round_data, dict):
        raise MalformedResponse("No round data in state response")

    raw_id = round_data.get("roundId")
    if raw_id is None:
        raw_id = data.get("currentRoundId")
    if raw_id is None:
        raise MalformedResponse("No round id in state response")
    try:
        round_id = int(raw_id)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(f"Invalid round id {raw_id!r}") from e
    if round_id < 0:
        raise MalformedResponse(f"Invalid round id {raw_id!r}")

    mining = round_data.get("mining")
    raw_status = mining.get("status") if isinstance(mining, dict) else None
    if raw_status is None:
        raise MalformedResponse("No mining status in state response")

    status = RoundStatus.parse(raw_status)
    if status is RoundStatus.UNKNOWN:
        logger.warning(f"Unrecognized round status {raw_status!r}, treating as inactive")

    return RoundSnapshot(round_id=round_id, status=status)
