import sys
import os
import logging
import importlib
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from config.database import UPLOAD_DIR
from config.settings import settings
from models.index import init_db
from utils.exceptions import EcoCycleError

logger = logging.getLogger("ecocycle")
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
logging.basicConfig(level=settings.LOG_LEVEL, handlers=[handler])

init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s API starting (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
# object storage mount
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")
# CORS: use our parsed list
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(EcoCycleError)
async def ecocycle_error_handler(request: Request, exc: EcoCycleError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


# load all routes
def load_routes(directory: Path):
    routers = []
    for item in sorted(directory.rglob("*_routes.py")):
        rel = item.relative_to(directory.parent).with_suffix("")
        module = importlib.import_module(".".join(rel.parts))
        if hasattr(module, "router"):
            routers.append(module.router)
    return routers


for router in load_routes(Path(__file__).parent / "api"):
    app.include_router(router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/")
def home():
    return {"message": f"Welcome to {settings.APP_NAME}"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", settings.PORT or 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=settings.DEBUG)
