import sys
from pathlib import Path

from taskboard.core.config import settings
from taskboard.core.logging import setup_logger
from taskboard.db.session import engine, init_db
from taskboard.db.seed import seed_all
from sqlmodel import Session

DEFAULT_SEED_PATH = Path(__file__).resolve().parent.parent / "taskboard" / "db" / "seed_data.yaml"


def run_seed(seed_path: Path = DEFAULT_SEED_PATH):
    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)
    init_db()
    with Session(engine) as session:
        # lancer le seed
        return seed_all(session=session, seed_path=seed_path)


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_PATH
    print(run_seed(path))
