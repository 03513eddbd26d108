"""
Run the API with uvicorn: python -m club_api
"""
import uvicorn

from club_api.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "club_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
