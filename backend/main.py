from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from api import search_stream
from settings.logging import setup_logging

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Shared HTTP clients and the local feature table live in the registry.
    await search_stream.close_registry()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiSearch(BaseModel):
    text: str
    clientId: str = Field(default=search_stream.DEFAULT_CLIENT, min_length=1, max_length=128)


class ApiSelect(BaseModel):
    index: int = Field(ge=0)
    clientId: str = Field(default=search_stream.DEFAULT_CLIENT, min_length=1, max_length=128)


@app.post("/search")
async def search(body: ApiSearch):
    return StreamingResponse(
        search_stream.handle_search(body.text, body.clientId),
        media_type="text/event-stream",
    )


@app.post("/autocomplete")
async def autocomplete(body: ApiSearch):
    return {"suggestions": await search_stream.autocomplete(body.text, body.clientId)}


# Session state must only be touched on the event loop: keep these `async def`.
@app.post("/select")
async def select(body: ApiSelect):
    out = search_stream.select_result(body.index, body.clientId)
    if out is None:
        raise HTTPException(status_code=404, detail=f"No result at index {body.index}")
    return out


@app.get("/translations/{locale}")
async def translations(locale: str):
    texts = search_stream.translations_for(locale)
    if texts is None:
        raise HTTPException(status_code=404, detail=f"Unknown locale: {locale}")
    return texts
