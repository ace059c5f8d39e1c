from __future__ import annotations

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="WeatherApp.Api demo service")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    # Logging is configured by the app itself; keep uvicorn from installing its own.
    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=bool(args.reload), log_config=None)


if __name__ == "__main__":
    main()
