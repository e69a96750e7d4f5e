"""webrag - Retrieval-augmented answers backed by planned web search

Simple CLI for querying and feeding the knowledge base.

The vector store lives in memory, so `stats` and `clear` are only useful
inside the interactive `shell`, which keeps one service for the session.
"""

import argparse
import asyncio
import shlex
import sys
import uuid
from pathlib import Path

from webrag.errors import FetchError, ModelError, NoResultsError, ValidationError, WebRagError
from webrag.models.rag import Document, GatedAnswer
from webrag.services.logger import configure_logging
from webrag.services.rag_service import RAGService
from webrag.services.topics import TopicExtractionOptions, extract_topics


def print_answer(result: GatedAnswer):
    if result.enriched:
        print(f"\n[~] Local knowledge insufficient: {'; '.join(result.reasons)}")
        if result.ingestion:
            print(f"  [+] {result.ingestion.documents_added} new documents added")
            print(f"  Variants: {' | '.join(result.ingestion.search_variants)}")
    elif result.enrichment_error:
        print(f"\n[!] Web enrichment failed: {result.enrichment_error}")

    print(f"\n{'='*50}")
    print("ANSWER:")
    print(f"{'='*50}")
    print(result.response.answer)

    urls = result.response.source_urls
    if urls:
        print("\n[*] Sources:")
        for i, url in enumerate(urls, 1):
            print(f"  {i}. {url}")
    print()


async def run_search(rag: RAGService, query: str):
    print(f"Search query: {query}")
    print("-" * 50)

    analysis = extract_topics(
        query,
        TopicExtractionOptions(language="both", min_word_length=3, max_topics=6),
    )
    print(f"[*] Topics: {', '.join(analysis.topics) or '-'}")
    print(f"    Optimized query: \"{analysis.cleaned_query}\"")

    print_answer(await rag.answer(query))


async def run_add_web(rag: RAGService, query: str, max_results: int):
    result = await rag.add_from_web_search(query, max_results=max_results)
    print(f"[+] {result.documents_added} documents added")
    if result.topic_analysis:
        print(f"  Topics: {', '.join(result.topic_analysis.topics)}")
        print(f"  Stop words removed: {', '.join(result.topic_analysis.removed_words)}")
        print(f"  Optimized query: \"{result.topic_analysis.cleaned_query}\"")


async def run_add_file(rag: RAGService, path: str):
    file_path = Path(path)
    if not file_path.is_file():
        print(f"[!] File not found: {path}")
        return
    content = file_path.read_text(encoding="utf-8")
    chunks = await rag.add_documents(
        [
            Document(
                id=f"file_{uuid.uuid4().hex[:12]}",
                content=content,
                metadata={"title": file_path.name, "source": "upload"},
            )
        ]
    )
    print(f"[+] File \"{file_path.name}\" added ({chunks} chunks)")


async def run_stats(rag: RAGService):
    stats = await rag.get_stats()
    store = stats["vector_store"]
    print("[*] Knowledge base:")
    print(f"  Sources: {len(store['sources'])}")
    print(f"  Chunks: {store['total_chunks']}")
    print(f"  Dimensions: {store['dimensions']}")
    for i, source in enumerate(store["sources"], 1):
        print(f"    {i}: {source['source'][:80]} ({source['chunks']} chunks)")
    print(f"  Model: {stats['ollama']['model']} (available: {stats['ollama']['available']})")


async def run_clear(rag: RAGService):
    stats = await rag.get_stats()
    count = len(stats["vector_store"]["sources"])
    await rag.clear()
    print("Nothing to remove" if count == 0 else f"Removed {count} sources")


async def run_models(rag: RAGService):
    for name in await rag.list_available_models():
        print(f"  - {name}")


async def dispatch(rag: RAGService, args: argparse.Namespace):
    if args.command == "search":
        await run_search(rag, " ".join(args.query))
    elif args.command == "add-web":
        await run_add_web(rag, " ".join(args.query), args.max_results)
    elif args.command == "add-file":
        await run_add_file(rag, args.path)
    elif args.command == "stats":
        await run_stats(rag)
    elif args.command == "clear":
        await run_clear(rag)
    elif args.command == "models":
        await run_models(rag)


def describe_error(error: WebRagError) -> str:
    if isinstance(error, ValidationError):
        return f"Invalid input: {error}"
    if isinstance(error, NoResultsError):
        return f"Nothing found: {error}"
    if isinstance(error, FetchError):
        return f"Network error: {error}"
    if isinstance(error, ModelError):
        return f"Model error: {error}"
    return f"Error: {error}"


async def run_shell(rag: RAGService, parser: argparse.ArgumentParser):
    print("Commands: search, add-web, add-file, stats, clear, models, exit")
    while True:
        try:
            line = await asyncio.to_thread(input, "webrag> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line in ("exit", "quit"):
            break

        try:
            tokens = shlex.split(line)
        except ValueError:
            # Unbalanced quotes, as in "c'est quoi Python".
            tokens = line.split()
        if tokens[0] not in COMMANDS:
            # Bare text is a question.
            tokens = ["search", *tokens]
        try:
            args = parser.parse_args(tokens)
        except SystemExit:
            continue

        try:
            await dispatch(rag, args)
        except WebRagError as e:
            print(f"[!] {describe_error(e)}")
    print("Bye!")


async def run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    rag = RAGService()
    try:
        await rag.initialize()
        if args.command in (None, "shell"):
            await run_shell(rag, parser)
        else:
            await dispatch(rag, args)
    except WebRagError as e:
        print(f"[!] {describe_error(e)}")
        return 1
    return 0


COMMANDS = ("search", "add-web", "add-file", "stats", "clear", "models", "shell")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="webrag knowledge base CLI")
    sub = parser.add_subparsers(dest="command")

    p_search = sub.add_parser("search", help="Answer a question, enriching from the web when needed")
    p_search.add_argument("query", nargs="+")

    p_web = sub.add_parser("add-web", help="Add web search results to the knowledge base")
    p_web.add_argument("query", nargs="+")
    p_web.add_argument("--max-results", "-n", type=int, default=8)

    p_file = sub.add_parser("add-file", help="Add a text file to the knowledge base")
    p_file.add_argument("path")

    sub.add_parser("stats", help="Show knowledge base statistics")
    sub.add_parser("clear", help="Empty the knowledge base")
    sub.add_parser("models", help="List models on the Ollama server")
    sub.add_parser("shell", help="Interactive session (default)")

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("webrag.main:app", host=args.host, port=args.port)
        return

    configure_logging()
    sys.exit(asyncio.run(run(args, parser)))


if __name__ == "__main__":
    main()
