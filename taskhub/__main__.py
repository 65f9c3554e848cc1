import uvicorn

from taskhub.core.config import settings
from taskhub.main import create_app


def main():
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
