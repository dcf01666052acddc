"""python -m coze_bridge：启动 HTTP 中转服务。"""

import uvicorn

from coze_bridge.config.settings import settings


def main() -> None:
    uvicorn.run(
        "coze_bridge.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
