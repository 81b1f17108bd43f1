import uvicorn

from campusmap.config import settings


def main() -> None:
    uvicorn.run("campusmap.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
