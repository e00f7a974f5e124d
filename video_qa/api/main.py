from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from video_qa.api.routes.cache import router as cache_router
from video_qa.api.routes.credentials import router as credentials_router
from video_qa.api.routes.videos import router as videos_router
from video_qa.config import settings

app = FastAPI(
    title="Video Q&A API",
    description="RAG-powered question answering over video transcripts",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "https://www.youtube.com",
    ],
    allow_origin_regex=r"chrome-extension://.*|http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(videos_router)
app.include_router(cache_router)
app.include_router(credentials_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
