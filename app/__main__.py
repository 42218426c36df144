import uvicorn

from app.main import settings


def main() -> None:
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
