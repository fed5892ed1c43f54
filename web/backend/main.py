from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from sonicstream.core.config import ensure_directories, get_data_dir, load_config
from sonicstream.core.database import init_database, set_database_path
from sonicstream.core.output import setup_loguru

config = load_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_directories()
    log_file = (
        Path(config.logging.log_file)
        if config.logging.log_file
        else get_data_dir() / "sonicstream.log"
    )
    setup_loguru(
        log_file,
        level=config.logging.level,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
        console_output=config.logging.console_output,
    )
    set_database_path(config.database.path)
    init_database()
    logger.info("SonicStream API ready")
    yield


app = FastAPI(title="SonicStream API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.web.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from web.backend.routers import imports, songs, stream, youtube

app.include_router(imports.router, prefix="/api", tags=["imports"])
app.include_router(stream.router, prefix="/api", tags=["stream"])
app.include_router(songs.router, prefix="/api", tags=["songs"])
app.include_router(youtube.router, prefix="/api", tags=["youtube"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
