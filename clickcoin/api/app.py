"""FastAPI application for ClickCoin market structure."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clickcoin.api.routers import structure
from clickcoin.config import CORS_ORIGINS

app = FastAPI(
    title="ClickCoin",
    description="Market structure (swing points, BOS/MSB) and coin scan API",
    version="0.1.0",
)

# Chart frontend runs on a separate origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(structure.router)


@app.get("/health")
def health():
    return {"status": "ok"}
