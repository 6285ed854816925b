"""Run the hub server: ``python -m hub.server``.

Settings are read before uvicorn starts so a missing AUTH_TOKEN_SECRET
stops the process immediately instead of failing on the first request.
"""

import sys

import structlog
import uvicorn
from pydantic import ValidationError

from hub.server.settings import HubServerSettings
from shared.auth.settings import AuthSettings
from shared.logging import setup_logging

logger = structlog.get_logger()


def main() -> None:
    settings = HubServerSettings()
    setup_logging(log_dir=settings.log_dir)
    try:
        AuthSettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
        logger.error("invalid auth configuration, refusing to start", fields=fields)
        sys.exit(1)

    uvicorn.run(
        "hub.server.app:get_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
