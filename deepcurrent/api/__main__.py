"""Run the API server: ``python -m deepcurrent.api``."""

import uvicorn

from deepcurrent.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "deepcurrent.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
