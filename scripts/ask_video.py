"""Ask questions about a video from the command line.

Reads the video's caption file from a transcripts directory, embeds it
(reusing the cache when possible) and answers questions.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from video_qa.config import settings
from video_qa.errors import ServiceError, VideoQAError
from video_qa.ingestion.cache import (
    CacheStore,
    JsonFileCacheStore,
    cache_stats,
    clear_cache,
    get_cache_store,
)
from video_qa.ingestion.models import EmbeddingProgress
from video_qa.ingestion.sources import CaptionFileSource, extract_video_id
from video_qa.openai_client import settings_credentials
from video_qa.pipeline_config import PipelineConfig
from video_qa.session import VideoSession


def build_cache(cache_path: Path | None) -> CacheStore:
    """Use the JSON file at *cache_path* if given, else the configured backend."""
    if cache_path is not None:
        return JsonFileCacheStore(cache_path)
    return get_cache_store()


def _print_progress(progress: EmbeddingProgress) -> None:
    print(
        f"\r  embedding {progress.completed}/{progress.total} ({progress.percent:.0f}%)",
        end="" if progress.completed < progress.total else "\n",
        file=sys.stderr,
    )


def _print_answer(session: VideoSession, question: str, top_k: int | None) -> None:
    answer = session.ask(question, top_k=top_k)
    print(f"\nQ: {question}\nA: {answer.text}")
    for result in answer.sources:
        print(f"   [chunk {result.index}, {result.similarity * 100:.1f}%]")


def main() -> None:
    parser = argparse.ArgumentParser(description="Ask questions about a video's transcript")
    parser.add_argument("video", nargs="?", help="YouTube URL or video id")
    parser.add_argument(
        "-q",
        "--question",
        action="append",
        default=[],
        help="Question to ask (repeatable); omit for interactive mode",
    )
    parser.add_argument(
        "--transcripts-dir",
        type=Path,
        default=Path(settings.transcripts_dir),
        help="Directory holding <video_id>.vtt/.srt/.json/.txt caption files",
    )
    parser.add_argument(
        "--cache",
        type=Path,
        default=None,
        help="JSON cache file to use instead of the configured cache backend",
    )
    parser.add_argument("--top-k", type=int, default=None, help="Number of excerpts to use")
    parser.add_argument("--clear-cache", action="store_true", help="Clear all cached data first")
    parser.add_argument("--stats", action="store_true", help="Print cache statistics and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cache = build_cache(args.cache)

    if args.clear_cache:
        removed = clear_cache(cache)
        print(f"Cleared {removed} cached transcript(s)", file=sys.stderr)

    if args.stats:
        stats = cache_stats(cache)
        print(f"Transcripts:    {stats.transcripts}")
        print(f"Chunk sets:     {stats.chunk_sets}")
        print(f"Embedding sets: {stats.embedding_sets}")
        print(f"Storage used:   {stats.size_mb:.2f} MB")
        return

    if not args.video:
        parser.error("a video URL or id is required")

    video_id = extract_video_id(args.video)
    if video_id is None:
        print(f"Error: could not detect a video id in {args.video!r}", file=sys.stderr)
        sys.exit(1)

    session = VideoSession(
        video_id,
        transcript_source=CaptionFileSource(args.transcripts_dir),
        cache=cache,
        credentials=settings_credentials,
        config=PipelineConfig.from_settings(settings),
        on_status=lambda message: print(message, file=sys.stderr),
        on_progress=_print_progress,
    )

    try:
        session.process()
        if args.question:
            for question in args.question:
                _print_answer(session, question, args.top_k)
            return

        print("Interactive mode. Empty line to quit.", file=sys.stderr)
        while True:
            try:
                question = input("> ").strip()
            except EOFError:
                break
            if not question:
                break
            try:
                _print_answer(session, question, args.top_k)
            except ServiceError:
                # Reported via on_status; the session is still usable
                continue
    except VideoQAError:
        # Status line already printed by the session
        sys.exit(1)


if __name__ == "__main__":
    main()
