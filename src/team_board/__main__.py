import uvicorn

from team_board.config import Settings


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run("team_board.app.asgi:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
