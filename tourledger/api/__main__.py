"""Run the ledger HTTP server: ``python -m tourledger.api``."""

import logging
import os

from dotenv import load_dotenv


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("TOURLEDGER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import uvicorn

    from .server import app

    host = os.getenv("TOURLEDGER_HOST", "0.0.0.0")
    port = int(os.getenv("TOURLEDGER_PORT", "3000"))
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
