"""GameSense engine HTTP client."""

from __future__ import annotations

from typing import Any, Iterable

import requests

from steelclock.rendering.encoder import PAYLOAD_SIZE

DEVICE_TYPE = "screened-128x40"
FRAME_KEY = "image-data-128x40"
DEFAULT_TIMEOUT_SECONDS = 0.5


class GameSenseError(RuntimeError):
    """Raised when an engine request fails or returns a non-200 response."""

    def __init__(self, message: str, path: str, status: int | None = None, retryable: bool = False) -> None:
        super().__init__(message)
        self.path = path
        self.status = status
        self.retryable = retryable


class GameSenseClient:
    """Thin wrapper around the engine's JSON endpoints using one requests session."""

    def __init__(
        self,
        address: str,
        game: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = f"http://{address}"
        self._game = game
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def game(self) -> str:
        return self._game

    def register_game(self, display_name: str, developer: str, deinitialize_timer_ms: int = 0) -> None:
        """Register this process as a game."""
        payload: dict[str, Any] = {
            "game": self._game,
            "game_display_name": display_name,
            "developer": developer,
        }
        if deinitialize_timer_ms > 0:
            payload["deinitialize_timer_length_ms"] = deinitialize_timer_ms
        self._post("/game_metadata", payload)

    def bind_screen_event(self, event: str, device_type: str = DEVICE_TYPE) -> None:
        """Bind ``event`` to the screen handler, priming it with a blank frame."""
        payload = {
            "game": self._game,
            "event": event,
            "value_optional": True,
            "handlers": [
                {
                    "device-type": device_type,
                    "zone": "one",
                    "mode": "screen",
                    "datas": [{"has-text": False, "image-data": [0] * PAYLOAD_SIZE}],
                }
            ],
        }
        self._post("/bind_game_event", payload)

    def supports_multiple_events(self) -> bool:
        """Best-effort capability probe for batched frame delivery."""
        try:
            response = self._session.get(
                f"{self._base_url}/supports_multiple_game_events", timeout=self._timeout_seconds
            )
        except requests.RequestException:
            return False
        return response.status_code == 200

    def send_frame(self, event: str, payload: bytes) -> None:
        """Deliver one encoded frame."""
        body = {"game": self._game, "event": event, "data": _frame_data(payload)}
        self._post("/game_event", body)

    def send_multiple_frames(self, event: str, payloads: Iterable[bytes]) -> None:
        """Deliver several encoded frames in one request."""
        events = [{"event": event, "data": _frame_data(payload)} for payload in payloads]
        self._post("/multiple_game_events", {"game": self._game, "events": events})

    def heartbeat(self) -> None:
        self._post("/game_heartbeat", {"game": self._game})

    def remove_game(self) -> None:
        self._post("/remove_game", {"game": self._game})

    def close(self) -> None:
        self._session.close()

    def _post(self, path: str, payload: dict[str, Any]) -> None:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.post(url, json=payload, timeout=self._timeout_seconds)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise GameSenseError(f"Engine request {path} failed: {exc}", path, retryable=True) from exc
        except requests.RequestException as exc:
            raise GameSenseError(f"Engine request {path} failed: {exc}", path) from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text}"
            raise GameSenseError(f"Engine request {path} failed: {detail}", path, status=response.status_code)


def _frame_data(payload: bytes) -> dict[str, Any]:
    return {"frame": {FRAME_KEY: list(payload)}}


__all__ = ["DEVICE_TYPE", "FRAME_KEY", "GameSenseClient", "GameSenseError"]
