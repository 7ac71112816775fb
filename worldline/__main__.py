"""Run the Worldline API with uvicorn."""

import argparse

import uvicorn

from worldline.config import settings


def main():
    parser = argparse.ArgumentParser(prog="worldline", description="Run the Worldline API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    uvicorn.run(
        "worldline.app:create_asgi_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
