import uvicorn

from .core.config import get_settings
from .main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,  # keep the JSON handlers installed by create_app
    )


if __name__ == "__main__":
    main()
