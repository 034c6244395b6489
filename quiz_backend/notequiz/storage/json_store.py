import json
import logging
import os
import tempfile
import threading
import uuid
from typing import Optional, Dict, Any, List


DEFAULT_DATA_FILE = "./data/notequiz.json"
COLLECTIONS = ("notes", "groups")

logger = logging.getLogger(__name__)

# Serializes load-modify-save sequences across threads and store instances
_LOCK = threading.RLock()


def _empty() -> Dict[str, Any]:
    return {name: [] for name in COLLECTIONS}


class NoteQuizJsonStore:
    """
    A simple JSON file store for notes and groups with safe atomic write operations.

    Data model:
    {
        "notes": [ {"id": ..., "title": ..., "url": ..., "quizzes": [...]}, ... ],
        "groups": [ {"id": ..., "name": ..., "description": ..., "members": [...],
                     "profilePicture": ...}, ... ]
    }

    Every mutating method holds a process-wide lock across its load, change
    and save, so concurrent requests never drop each other's records. Two
    writes to the same note still resolve as last-writer-wins.
    """

    # PUBLIC_INTERFACE
    def __init__(self, path: Optional[str] = None) -> None:
        """
        Initialize the JSON store.

        - Determines the storage path from the provided argument, the QUIZ_DATA_FILE
          environment variable, or falls back to DEFAULT_DATA_FILE.
        - Ensures the parent directory exists.
        """
        env_path = os.getenv("QUIZ_DATA_FILE")
        self.path = os.path.abspath(path or env_path or DEFAULT_DATA_FILE)

        parent_dir = os.path.dirname(self.path) or "."
        os.makedirs(parent_dir, exist_ok=True)

    # PUBLIC_INTERFACE
    def load_all(self) -> Dict[str, Any]:
        """
        Load and return the entire data structure from the JSON file.
        If the file does not exist, it will be created with the default structure.

        Returns:
            dict: The data in the form {"notes": [ ... ], "groups": [ ... ]}.
        """
        with _LOCK:
            return self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            data = _empty()
            self._atomic_write(data)
            return data

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            # A corrupted file is reset so the service keeps functioning.
            logger.warning("Data file %s is not valid JSON; resetting it", self.path)
            data = _empty()
            self._atomic_write(data)
            return data

        if not isinstance(data, dict):
            logger.warning("Data file %s has an unexpected shape; resetting it", self.path)
            data = _empty()
            self._atomic_write(data)
            return data

        # Fill in collections missing from older files
        changed = False
        for name in COLLECTIONS:
            if not isinstance(data.get(name), list):
                data[name] = []
                changed = True
        if changed:
            self._atomic_write(data)

        return data

    # PUBLIC_INTERFACE
    def save_all(self, data: Dict[str, Any]) -> None:
        """
        Persist the provided data to the JSON file using an atomic write.

        Args:
            data (dict): The full data structure to persist.
        """
        if not isinstance(data, dict):
            raise ValueError("Data must be a dict")
        for name in COLLECTIONS:
            if not isinstance(data.get(name), list):
                raise ValueError(f"Data must contain '{name}' as a list")

        with _LOCK:
            self._atomic_write(data)

    # ---- notes -------------------------------------------------------------

    # PUBLIC_INTERFACE
    def add_note(self, note: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a note to the store and persist.

        Args:
            note (dict): Note object with at least a 'url' key. An 'id' is
                assigned when missing and 'quizzes' defaults to an empty list.

        Returns:
            dict: The stored note.
        """
        record = dict(note)
        record.setdefault("id", uuid.uuid4().hex)
        record.setdefault("quizzes", [])
        with _LOCK:
            data = self._load()
            data["notes"].append(record)
            self.save_all(data)
        return record

    # PUBLIC_INTERFACE
    def get_note(self, note_id: str) -> Optional[Dict[str, Any]]:
        """Return the note with the given id, or None."""
        data = self.load_all()
        return _find(data["notes"], note_id)

    # PUBLIC_INTERFACE
    def list_notes(self) -> List[Dict[str, Any]]:
        """Return all stored notes."""
        return list(self.load_all()["notes"])

    # PUBLIC_INTERFACE
    def set_note_quizzes(self, note_id: str, quizzes: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """
        Replace the quiz collection attached to a note.

        Args:
            note_id (str): The note identifier.
            quizzes (list[dict]): Serialized quiz questions, in order.

        Returns:
            dict | None: The updated note, or None if the note does not exist.
        """
        with _LOCK:
            data = self._load()
            note = _find(data["notes"], note_id)
            if note is None:
                return None
            note["quizzes"] = list(quizzes)
            self.save_all(data)
        return note

    # PUBLIC_INTERFACE
    def get_note_quizzes(self, note_id: str) -> Optional[List[Dict[str, Any]]]:
        """Return the quizzes attached to a note, or None if the note does not exist."""
        note = self.get_note(note_id)
        if note is None:
            return None
        return list(note.get("quizzes") or [])

    # ---- groups ------------------------------------------------------------

    # PUBLIC_INTERFACE
    def create_group(self, group: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new group under a fresh identifier and return it."""
        record = dict(group)
        record["id"] = uuid.uuid4().hex
        record.setdefault("members", [])
        with _LOCK:
            data = self._load()
            data["groups"].append(record)
            self.save_all(data)
        return record

    # PUBLIC_INTERFACE
    def list_groups(self) -> List[Dict[str, Any]]:
        """Return all stored groups."""
        return list(self.load_all()["groups"])

    # PUBLIC_INTERFACE
    def get_group(self, group_id: str) -> Optional[Dict[str, Any]]:
        """Return the group with the given id, or None."""
        return _find(self.load_all()["groups"], group_id)

    # PUBLIC_INTERFACE
    def update_group(self, group_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge changes into a stored group. The identifier cannot be changed.

        Returns:
            dict | None: The updated group, or None if it does not exist.
        """
        with _LOCK:
            data = self._load()
            group = _find(data["groups"], group_id)
            if group is None:
                return None
            group.update({k: v for k, v in changes.items() if k != "id"})
            self.save_all(data)
        return group

    # PUBLIC_INTERFACE
    def delete_group(self, group_id: str) -> bool:
        """Remove a group. Returns False if it did not exist."""
        with _LOCK:
            data = self._load()
            remaining = [g for g in data["groups"] if not _matches(g, group_id)]
            if len(remaining) == len(data["groups"]):
                return False
            data["groups"] = remaining
            self.save_all(data)
        return True

    # PUBLIC_INTERFACE
    def set_group_profile_picture(self, group_id: str, path: str) -> Optional[Dict[str, Any]]:
        """Record the stored profile picture path on a group."""
        return self.update_group(group_id, {"profilePicture": path})

    def _atomic_write(self, data: Dict[str, Any]) -> None:
        """
        Write JSON to a temporary file and atomically replace the target.

        This ensures that readers never see a partially-written file.
        """
        directory = os.path.dirname(self.path) or "."
        fd, tmp_path = tempfile.mkstemp(prefix=".notequiz.", suffix=".tmp", dir=directory, text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                json.dump(data, tmp_file, indent=2, ensure_ascii=False)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, self.path)
        finally:
            # If os.replace succeeded, tmp_path no longer exists
            if os.path.exists(tmp_path):
                os.remove(tmp_path)


def _matches(record: Any, record_id: str) -> bool:
    return isinstance(record, dict) and str(record.get("id")) == str(record_id)


def _find(records: List[Any], record_id: str) -> Optional[Dict[str, Any]]:
    for record in records:
        if _matches(record, record_id):
            return record
    return None
