from sqlalchemy import create_engine

from app.jokes.models import Base, User
from app.jokes.modules.jokes.models import Joke
from scripts import init_db
from scripts._db_utils import script_session


def test_seed_is_idempotent(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("ADMIN_USERNAME", "kody")
    monkeypatch.setenv("ADMIN_PASSWORD", "twixrox")
    engine = create_engine(db_url)
    Base.metadata.create_all(bind=engine)
    engine.dispose()

    init_db.seed_only(database_url=db_url)
    init_db.seed_only(database_url=db_url)

    with script_session(db_url) as s:
        user = s.query(User).filter(User.username == "kody").one()
        assert s.query(User).count() == 1
        assert s.query(Joke).filter(Joke.jokester_id == user.id).count() == len(init_db.SAMPLE_JOKES)
