import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

PLAYER_SESSION_KEY = 'player_session'


class ResumeStore:
    """JSON-file key/value storage for data that must survive a reload."""

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning(f"[storage] unreadable {self.path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with tmp.open('w', encoding='utf-8') as handle:
            json.dump(data, handle)
        tmp.replace(self.path)

    def get(self, key=PLAYER_SESSION_KEY):
        return self._load().get(key)

    def set(self, value, key=PLAYER_SESSION_KEY) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key=PLAYER_SESSION_KEY) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def clear(self) -> None:
        self._save({})
