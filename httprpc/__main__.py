"""Run the dispatcher with uvicorn: `python -m httprpc`."""

import uvicorn

from httprpc.config import get_settings
from httprpc.main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
