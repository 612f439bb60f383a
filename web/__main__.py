"""
Web 진입점

실행 방법:
    python -m web

설정 파일: config/settings.yaml (없으면 기본값, development DB 사용)
"""

import uvicorn

from core.constants import Defaults

if __name__ == "__main__":
    uvicorn.run(
        "web.app:app",
        host=Defaults.WEB_HOST,
        port=Defaults.WEB_PORT,
        log_level=Defaults.LOG_LEVEL.lower(),
        reload=False,
    )
