import os
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.jokes.models import User  # noqa: E402
from app.jokes.modules.jokes.models import Joke  # noqa: E402
from scripts._db_utils import script_session  # noqa: E402

SAMPLE_JOKES = (
    (
        "Road worker",
        "I never wanted to believe that my Dad was stealing from his job as a road worker. "
        "But when I got home, all the signs were there.",
    ),
    ("Frisbee", "I was wondering why the frisbee was getting bigger, then it hit me."),
    ("Trees", "Why do trees seem suspicious on sunny days? Dunno, they're just a bit shady."),
    ("Skeletons", "Why don't skeletons ride roller coasters? They don't have the stomach for it."),
    ("Hippos", "Why don't you find hippopotamuses hiding in trees? They're really good at it."),
    ("Dinner", "What did one plate say to the other plate? Dinner is on me!"),
    ("Elevator", "My first time using an elevator was an uplifting experience. The second time let me down."),
)


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed the demo jokester and sample jokes in an idempotent way.
    Does NOT overwrite an existing user's password.
    """
    username = (os.environ.get("ADMIN_USERNAME") or "kody").strip()
    password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///jokes.db").strip()

    with script_session(db_url) as s:
        user = s.query(User).filter(User.username == username).one_or_none()
        if not user:
            user = User(username=username, password_hash=generate_password_hash(password))
            s.add(user)
            s.flush()

        existing = {name for (name,) in s.query(Joke.name).filter(Joke.jokester_id == user.id)}
        added = 0
        for name, content in SAMPLE_JOKES:
            if name in existing:
                continue
            s.add(Joke(name=name, content=content, jokester_id=user.id))
            added += 1

    print("Initialized database (seed_only).")
    print(f"Jokester: {username} (password from ADMIN_PASSWORD)")
    print(f"Sample jokes added: {added}")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
