from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping

from app.jokes.audit import record_event

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.jokes.models import User
    from app.jokes.modules.jokes.models import Joke

logger = logging.getLogger(__name__)

FORM_NOT_SUBMITTED = "Form not submitted correctly"
RECENT_JOKES_LIMIT = 20


@dataclass(frozen=True)
class JokeFields:
    name: str
    content: str


@dataclass(frozen=True)
class JokeFieldErrors:
    name: str | None = None
    content: str | None = None

    def any(self) -> bool:
        return bool(self.name or self.content)


@dataclass(frozen=True)
class NewJokeActionData:
    """What the /jokes/new action hands back to the view on a bad request."""

    field_errors: JokeFieldErrors | None
    fields: JokeFields | None
    form_error: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fieldErrors": asdict(self.field_errors) if self.field_errors else None,
            "fields": asdict(self.fields) if self.fields else None,
            "formError": self.form_error,
        }


def validate_joke_name(name: str) -> str | None:
    if len(name) < 3:
        return "Joke name must be at least 3 characters long"
    return None


def validate_joke_content(content: str) -> str | None:
    if len(content) < 10:
        return "Joke content must be at least 10 characters long"
    return None


def parse_joke_form(form: Mapping[str, Any]) -> JokeFields | NewJokeActionData:
    """
    Returns the submitted fields when they are valid, otherwise the action
    data describing what is wrong. Both validators always run.
    """
    content = form.get("content")
    name = form.get("name")
    if not isinstance(content, str) or not isinstance(name, str):
        return NewJokeActionData(field_errors=None, fields=None, form_error=FORM_NOT_SUBMITTED)

    field_errors = JokeFieldErrors(
        name=validate_joke_name(name),
        content=validate_joke_content(content),
    )
    fields = JokeFields(name=name, content=content)
    if field_errors.any():
        return NewJokeActionData(field_errors=field_errors, fields=fields, form_error=None)
    return fields


def create_joke(s: "Session", fields: JokeFields, jokester_id: str) -> "Joke":
    from app.jokes.models import User
    from app.jokes.modules.jokes.models import Joke

    now = datetime.utcnow()
    joke = Joke(
        name=fields.name,
        content=fields.content,
        jokester_id=jokester_id,
        created_at=now,
        updated_at=now,
    )
    s.add(joke)
    s.flush()

    record_event(
        s,
        actor=s.get(User, jokester_id),
        action="joke.create",
        entity_type="Joke",
        entity_id=joke.id,
        metadata={"name": joke.name},
    )
    logger.info("Created joke id=%s jokester_id=%s", joke.id, jokester_id)
    return joke


def delete_joke(s: "Session", joke: "Joke", user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="joke.delete",
        entity_type="Joke",
        entity_id=joke.id,
        metadata={"name": joke.name},
    )
    s.delete(joke)
    logger.info("Deleted joke id=%s by user_id=%s", joke.id, user.id)


def recent_jokes(s: "Session", limit: int = RECENT_JOKES_LIMIT) -> list["Joke"]:
    from app.jokes.modules.jokes.models import Joke

    return s.query(Joke).order_by(Joke.created_at.desc(), Joke.id.asc()).limit(limit).all()
