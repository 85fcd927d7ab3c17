from __future__ import annotations

from flask import Blueprint, abort, current_app, g, jsonify, redirect, render_template, request, url_for
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response

from app.jokes.db import db_session
from app.jokes.models import User
from app.jokes.modules.jokes.models import Joke
from app.jokes.modules.jokes.service import (
    NewJokeActionData,
    create_joke,
    delete_joke,
    parse_joke_form,
    recent_jokes,
)
from app.jokes.session import get_user_id, require_user_id
from app.jokes.utils import bad_request, wants_json

bp = Blueprint("jokes", __name__)

NEW_JOKE_PATH = "/jokes/new"


# ---------- /jokes/new: loader, action, view, error boundary ----------
def new_joke_loader() -> dict:
    """Anonymous visitors get a 401 so the error boundary can explain why."""
    if not get_user_id():
        abort(401)
    return {}


def new_joke_action() -> Response | tuple[NewJokeActionData, int]:
    user_id = require_user_id(NEW_JOKE_PATH)
    result = parse_joke_form(request.form)
    if isinstance(result, NewJokeActionData):
        return bad_request(result)

    s = db_session()
    joke = create_joke(s, result, user_id)
    s.commit()
    return redirect(url_for("jokes.joke_detail", joke_id=joke.id))


def render_new_joke(action_data: NewJokeActionData | None = None) -> str:
    return render_template("jokes/new.html", action_data=action_data)


def new_joke_error_boundary(error: HTTPException):
    if error.code == 401:
        if wants_json():
            return "", 401
        return render_template("jokes/error.html", unauthorized=True), 401

    original = getattr(error, "original_exception", None)
    if original is not None:
        current_app.logger.error(
            "Unhandled error on %s (request_id=%s)",
            request.path,
            getattr(g, "request_id", None),
            exc_info=original,
        )
    status = error.code or 500
    if wants_json():
        return jsonify({"error": "Something unexpected went wrong. Sorry about that."}), status
    return render_template("jokes/error.html", unauthorized=False), status


@bp.get(NEW_JOKE_PATH)
def jokes_new_get():
    loader_data = new_joke_loader()
    if wants_json():
        return jsonify(loader_data)
    return render_new_joke()


@bp.post(NEW_JOKE_PATH)
def jokes_new_post():
    result = new_joke_action()
    if isinstance(result, Response):
        return result
    action_data, status = result
    if wants_json():
        return jsonify(action_data.to_dict()), status
    return render_new_joke(action_data), status


bp.register_error_handler(401, new_joke_error_boundary)
bp.register_error_handler(500, new_joke_error_boundary)


# ---------- Index ----------
@bp.get("/jokes")
def jokes_index():
    s = db_session()
    return render_template("jokes/index.html", jokes=recent_jokes(s))


# ---------- Detail ----------
def _get_joke_or_404(joke_id: str) -> Joke:
    joke = db_session().get(Joke, joke_id)
    if joke is None:
        abort(404, description=f"What's a joke with id {joke_id}? No such joke.")
    return joke


@bp.get("/jokes/<joke_id>")
def joke_detail(joke_id: str):
    joke = _get_joke_or_404(joke_id)
    is_owner = get_user_id() == joke.jokester_id
    return render_template("jokes/detail.html", joke=joke, is_owner=is_owner)


@bp.post("/jokes/<joke_id>")
def joke_detail_post(joke_id: str):
    intent = request.form.get("intent")
    if intent != "delete":
        abort(400, description=f"The intent {intent} is not supported")

    user_id = require_user_id(url_for("jokes.joke_detail", joke_id=joke_id))
    joke = _get_joke_or_404(joke_id)
    if joke.jokester_id != user_id:
        abort(403, description="Pssh, nice try. That's not your joke.")

    s = db_session()
    user = s.get(User, user_id)
    delete_joke(s, joke, user)
    s.commit()
    return redirect(url_for("jokes.jokes_index"))


@bp.errorhandler(400)
@bp.errorhandler(403)
@bp.errorhandler(404)
def _joke_http_error(error: HTTPException):
    return render_template("errors/http.html", error=error), error.code
