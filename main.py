import argparse
import logging
import uvicorn
from fastapi import FastAPI, Depends
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db, get_db
from config import load_config
from routes import state, grades, rewards, transfer, sync, stats, library  # Import routers
from routes.state import read_state
from utils.ledger import level_info

logger = logging.getLogger(__name__)

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init DB and config
    load_config()  # Ensures config exists
    init_db()
    yield
    # Shutdown if needed

app = FastAPI(title="Study Island", description="Local-first study progress tracker with rewards", lifespan=lifespan)

# Include routers
app.include_router(state.router, tags=["state"])
app.include_router(grades.router, prefix="/grades", tags=["grades"])
app.include_router(rewards.router, prefix="/rewards", tags=["rewards"])
app.include_router(transfer.router, tags=["import"])
app.include_router(sync.router, prefix="/sync", tags=["sync"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])
app.include_router(library.router, prefix="/library", tags=["library"])

# Dependency for DB connection
def get_db_conn():
    yield from get_db()

# Home - short summary of the learner's island
@app.get("/")
async def home(conn = Depends(get_db_conn)):
    current = read_state(conn)
    level = level_info(current.user_data.exp, current.settings.island_levels)
    return {
        "title": current.settings.app_title or "Study Island",
        "grades": [{"id": g.id, "name": g.name} for g in current.grades],
        "exp": current.user_data.exp,
        "coins": current.user_data.coins,
        "level": level.to_wire(),
    }

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Study Island App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.init:
        load_config()  # Ensures config is copied if missing
        init_db()
        logger.info("DB initialized and config copied to ~/.studyisland/")
        sys.exit(0)
    # Run server
    server = load_config()["server"]
    uvicorn.run("main:app", host=server["host"], port=server["port"], reload=args.dev, log_level="info")
