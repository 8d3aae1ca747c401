"""FastAPI application entrypoint.

Re-exports the API application and, in ``dev`` mode, makes sure the
database schema exists and the default catalog rows are seeded before
serving requests.
"""

from __future__ import annotations

import logging

from .api import app as app  # re-use existing API routes
from .config import get_port, is_dev
from .database import ensure_schema, new_session
from .services import run_seed

logger = logging.getLogger(__name__)


@app.on_event("startup")
def _bootstrap() -> None:
    if not is_dev():
        return
    ensure_schema()
    with new_session() as session:
        run_seed(session)


def run() -> None:  # pragma: no cover - manual entry point
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Starting printquote API")
    uvicorn.run(app, host="127.0.0.1", port=get_port())


if __name__ == "__main__":  # pragma: no cover
    run()
