from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Web search
    search_engine: str = "duckduckgo"  # duckduckgo | google | bing
    web_max_results: int = 10
    web_timeout_ms: int = 15000
    web_retry_attempts: int = 3
    web_retry_delay_ms: int = 1000
    web_min_content_length: int = 200
    web_include_domains: str = ""  # comma separated
    web_exclude_domains: str = ""  # comma separated
    web_max_parallel_fetches: int = 8
    web_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Topic extraction defaults for ingestion
    topic_language: str = "both"  # fr | en | both
    topic_min_word_length: int = 3
    topic_max_topics: int = 6

    # Ollama (embeddings + generation)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:latest"
    ollama_embedding_model: str = "nomic-embed-text"
    ollama_temperature: float = 0.7
    ollama_max_tokens: int = 2048
    ollama_timeout_seconds: float = 120.0

    # Vector store / retrieval
    vector_dimensions: int = 768
    retrieval_top_k: int = 5
    retrieval_threshold: float = 0.7

    # Chunking
    chunk_max_size: int = 1000
    chunk_overlap: int = 200

    # Retrieval-sufficiency gate
    enrichment_min_sources: int = 3
    enrichment_min_answer_chars: int = 200
    enrichment_max_results: int = 10
    enrichment_max_variants: int = 4

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def include_domain_list(self) -> list[str]:
        return _split_csv(self.web_include_domains)

    @property
    def exclude_domain_list(self) -> list[str]:
        return _split_csv(self.web_exclude_domains)


def _split_csv(raw: str) -> list[str]:
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


settings = Settings()
