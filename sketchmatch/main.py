from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from . import config
from .api.routes import router
from .logging_utils import configure_logging

def create_app() -> FastAPI:
    # Initialize FastAPI app
    app = FastAPI(title="Sketch identification")

    # Enable CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount routes
    app.include_router(router, prefix="/api")
    return app

app = create_app()

def main() -> None:
    configure_logging(config.LOG_LEVEL)

    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)

if __name__ == "__main__":
    main()
