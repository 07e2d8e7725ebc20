import uvicorn

from localegen.core.app import create_app
from localegen.core.config import get_settings


def run() -> None:
    """Entrypoint for `localegen-api` script."""
    settings = get_settings()
    uvicorn.run(
        "localegen.main:create_app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        factory=True,
    )


if __name__ == "__main__":
    run()
