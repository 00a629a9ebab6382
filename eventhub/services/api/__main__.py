# eventhub/services/api/__main__.py
from __future__ import annotations

import uvicorn

from eventhub.common.settings import get_settings


def main() -> None:
    cfg = get_settings()
    uvicorn.run(
        "eventhub.services.api.app:app",
        host=cfg.api.host,
        port=cfg.api.port,
        log_level=cfg.log_level.lower(),
        reload=cfg.app_env.lower() == "development",
    )


if __name__ == "__main__":
    main()
