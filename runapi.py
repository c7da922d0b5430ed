# runapi.py
import os

import uvicorn

if __name__ == "__main__":
    # FastAPI app 路徑： services.CalendarServer.app.main:app
    uvicorn.run(
        "services.CalendarServer.app.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "30000")),
        reload=os.getenv("API_RELOAD", "1").lower() in ("1", "true", "yes"),  # 上線時要關掉
    )
