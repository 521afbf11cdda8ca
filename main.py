"""Launch the road pathfinder FastAPI server."""

import logging

import uvicorn

from road_pathfinder.config import ServerSettings


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = ServerSettings.from_env()
    uvicorn.run("road_pathfinder.server:app", host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    main()
