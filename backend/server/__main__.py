"""Run the API with uvicorn: `python -m server` from backend/, or the `exambridge` script."""

import uvicorn

from server.config import IS_PRODUCTION, LOG_LEVEL, PORT


def main():
    uvicorn.run("server:app", host="0.0.0.0", port=PORT, reload=not IS_PRODUCTION, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
