from __future__ import annotations

import copy
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

TASKS = "tasks"
SESSIONS = "sessions"
THEME = "theme"

SessionType = Literal["WORK", "STUDY"]


class TaskRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    description: str = ""
    completed: bool = False
    createdAt: str
    active: bool = False
    totalTimeSpent: int = 0
    estimatedTime: int = 0


class SessionRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    startTime: str
    endTime: str
    subject: str = ""
    notes: str = ""
    sessionType: SessionType = "WORK"
    projectName: str = ""

    @field_validator("sessionType", mode="before")
    @classmethod
    def _default_unknown_session_type(cls, value: Any) -> Any:
        # Older files may carry types this build no longer knows.
        if value not in ("WORK", "STUDY"):
            return "WORK"
        return value

    @field_validator("projectName", "subject", "notes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class TasksDocument(BaseModel):
    """
    Mirrors the on-disk tasks.json schema:
      { "tasks": [ {id, title, description, completed, createdAt, active, totalTimeSpent, estimatedTime}, ... ] }
    """

    model_config = ConfigDict(extra="allow")

    tasks: list[TaskRecord] = Field(default_factory=list)


class SessionsDocument(BaseModel):
    """
    Mirrors the on-disk sessions.json schema:
      { "sessions": [ {id, startTime, endTime, subject, notes, sessionType, projectName}, ... ] }
    """

    model_config = ConfigDict(extra="allow")

    sessions: list[SessionRecord] = Field(default_factory=list)


class ThemeDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    darkMode: bool = False


# Known document names -> schema, and the field that holds each collection.
DOCUMENT_MODELS: dict[str, type[BaseModel]] = {
    TASKS: TasksDocument,
    SESSIONS: SessionsDocument,
    THEME: ThemeDocument,
}

COLLECTION_KEYS: dict[str, str] = {
    TASKS: "tasks",
    SESSIONS: "sessions",
}


def collection_key(name: str) -> str | None:
    return COLLECTION_KEYS.get(name)


def default_document(name: str) -> Any:
    model = DOCUMENT_MODELS.get(name)
    if model is None:
        return {}
    return model().model_dump(mode="json")


def from_disk_doc(name: str, raw: Any) -> Any:
    """
    Return a document in its canonical shape.

    Legacy migration: files written by older versions hold the collection as a
    bare array ([...]) instead of { "<key>": [...] }; those are wrapped here.
    Everything else is returned unchanged.
    """
    key = collection_key(name)
    if key is not None and isinstance(raw, list):
        return {key: raw}
    return raw


def extract_collection(name: str, raw: Any) -> list[Any]:
    key = collection_key(name) or name
    if isinstance(raw, Mapping):
        value = raw.get(key)
        return list(value) if isinstance(value, list) else []
    if isinstance(raw, list):
        return list(raw)
    return []


def validate_document(name: str, content: Any) -> Any:
    """
    Validate a known document against its schema and return the normalized
    JSON form. Unknown names pass through untouched.

    Raises pydantic.ValidationError for malformed known documents, and
    ValueError for a collection document missing its collection field, so an
    incomplete import never replaces stored items with an empty list.
    """
    model = DOCUMENT_MODELS.get(name)
    if model is None:
        return copy.deepcopy(content)
    doc = from_disk_doc(name, content)
    key = collection_key(name)
    if key is not None and isinstance(doc, Mapping) and key not in doc:
        raise ValueError(f"{name} document has no {key!r} field")
    return model.model_validate(doc).model_dump(mode="json")
