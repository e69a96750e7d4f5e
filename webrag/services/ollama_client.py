"""Embedding and answer generation against a local Ollama server."""
from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger

from webrag.config import settings
from webrag.errors import ModelError
from webrag.services.logger import log_llm_call

ANSWER_PROMPT = """You are an assistant that answers questions using only the context below.
If the context does not contain the answer, say that you could not find the information.
Answer in the language of the question.

Context:
{context}

Question: {query}

Answer:"""


class OllamaClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        model: str | None = None,
        embedding_model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self.model = model or settings.ollama_model
        self.embedding_model = embedding_model or settings.ollama_embedding_model
        self.temperature = settings.ollama_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.ollama_max_tokens
        self.timeout_seconds = timeout_seconds or settings.ollama_timeout_seconds
        self._transport = transport

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or self.timeout_seconds,
            transport=self._transport,
        )

    async def _post(self, path: str, payload: dict[str, Any], *, model: str, caller: str) -> dict:
        started = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.post(path, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            elapsed_ms = int((time.monotonic() - started) * 1000)
            log_llm_call(model=model, caller=caller, duration_ms=elapsed_ms, status="error", error=str(e))
            raise ModelError(f"Ollama {path} failed: {e}") from e

        elapsed_ms = int((time.monotonic() - started) * 1000)
        log_llm_call(model=model, caller=caller, duration_ms=elapsed_ms)
        return data

    async def embed_text(self, text: str) -> list[float]:
        data = await self._post(
            "/api/embeddings",
            {"model": self.embedding_model, "prompt": text},
            model=self.embedding_model,
            caller="embed_text",
        )
        embedding = data.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            raise ModelError("Ollama returned an empty embedding")
        return [float(v) for v in embedding]

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        # The embeddings endpoint takes one prompt per call.
        vectors: list[list[float]] = []
        for text in texts:
            vectors.append(await self.embed_text(text))
        return vectors

    async def generate_answer(self, query: str, context_chunks: Sequence[str]) -> str:
        context = "\n\n".join(f"[{i}] {chunk}" for i, chunk in enumerate(context_chunks, 1))
        data = await self._post(
            "/api/generate",
            {
                "model": self.model,
                "prompt": ANSWER_PROMPT.format(context=context, query=query),
                "stream": False,
                "options": {
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                },
            },
            model=self.model,
            caller="generate_answer",
        )
        return str(data.get("response", "")).strip()

    async def list_models(self) -> list[str]:
        try:
            async with self._client() as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ModelError(f"Could not list Ollama models: {e}") from e
        return [m.get("name", "") for m in payload.get("models", []) if m.get("name")]

    async def is_available(self) -> bool:
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get("/api/tags")
            return response.is_success
        except httpx.HTTPError as e:
            logger.debug(f"Ollama not reachable at {self.base_url}: {e}")
            return False

    async def test_embedding(self) -> dict[str, Any]:
        try:
            vector = await self.embed_text("test")
        except ModelError as e:
            return {"success": False, "error": str(e)}
        return {"success": True, "dimensions": len(vector)}
