"""
Best-effort persistence of a session's settings and score blob.
"""
import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.exceptions import CorruptPersistedState
from app.models.saved_session import SavedSession
from app.schemas.session import PersistedSettings

logger = logging.getLogger(__name__)

# Scoreboard counters fall back to the match counters when missing
_SCORE_FALLBACKS = {
    "score_x": "match_x",
    "score_o": "match_o",
    "score_d": "draws",
}


def decode_blob(raw: Union[str, bytes, Dict[str, Any], None]) -> Dict[str, Any]:
    """Turn a stored blob into a dict, or raise CorruptPersistedState."""
    if raw is None:
        raise CorruptPersistedState("No saved data")
    if isinstance(raw, dict):
        return raw
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise CorruptPersistedState(f"Saved data is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise CorruptPersistedState(f"Saved data must be an object, got {type(data).__name__}")
    return data


def load_persisted(raw: Union[str, bytes, Dict[str, Any], None]) -> PersistedSettings:
    """
    Read a blob field by field.

    Any field that is missing or does not validate keeps its default; a blob
    that cannot be read at all yields the defaults for every field.
    """
    try:
        data = decode_blob(raw)
    except CorruptPersistedState as e:
        logger.warning(f"Ignoring saved settings: {e}")
        return PersistedSettings()

    values: Dict[str, Any] = {}
    for name, field in PersistedSettings.model_fields.items():
        key = field.alias or name
        if key not in data or data[key] is None:
            continue
        try:
            checked = PersistedSettings.model_validate({key: data[key]})
        except ValidationError as e:
            logger.warning(f"Saved field '{key}' is invalid, using default: {e.errors()[0]['msg']}")
            continue
        values[name] = getattr(checked, name)

    for score_field, match_field in _SCORE_FALLBACKS.items():
        if score_field not in values and match_field in values:
            values[score_field] = values[match_field]

    return PersistedSettings(**values)


class SessionStore:
    """Reads and writes saved sessions in the ``saved_sessions`` table."""

    def __init__(self, db: Session):
        self.db = db

    def load(self, session_key: str) -> Optional[PersistedSettings]:
        row = self.db.query(SavedSession).filter(
            SavedSession.session_key == session_key
        ).first()
        if row is None:
            return None
        return load_persisted(row.data)

    def save(self, session_key: str, settings: PersistedSettings) -> bool:
        """Write the blob. Failures are logged and reported as False."""
        try:
            payload = json.dumps(settings.to_blob())
            row = self.db.query(SavedSession).filter(
                SavedSession.session_key == session_key
            ).first()
            if row is None:
                self.db.add(SavedSession(session_key=session_key, data=payload))
            else:
                row.data = payload
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save session {session_key}: {e}")
            return False
