from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from .schemas import AppState

logger = logging.getLogger(__name__)

STATE_KEY = "rental_sale_calculator:v1"


class Storage(Protocol):
    def load(self) -> Optional[AppState]: ...
    def save(self, state: AppState) -> None: ...


class NoopStorage:
    """Storage that remembers nothing."""

    def load(self) -> Optional[AppState]:
        return None

    def save(self, state: AppState) -> None:
        return None


class JsonFileStorage:
    """Keep the last input snapshot in a local JSON file under ``STATE_KEY``."""

    def __init__(self, path: Union[str, Path], key: str = STATE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def load(self) -> Optional[AppState]:
        if not self.path.exists():
            return None
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            raw = document.get(self.key)
            if raw is None:
                return None
            return AppState.from_dict(raw)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return None

    def save(self, state: AppState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {self.key: state.to_dict()}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.debug("Saved calculator state to %s", self.path)
