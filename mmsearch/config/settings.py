from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # Embedding provider (OpenAI-compatible /v1/embeddings)
    embedding_enabled: bool = False
    embedding_url: str = ""
    embedding_api_key: str = ""
    embedding_text_model: str = "qwen3-embedding"
    embedding_image_model: str = "siglip2-embedding"
    embedding_timeout: float = 30.0
    # SigLIP2 accepts 64 tokens, roughly 20 words
    cross_modal_max_words: int = 20

    typesense_host: str = "localhost"
    typesense_port: int = 8108
    typesense_protocol: str = "http"
    typesense_path: str = ""
    typesense_api_key: str = "xyz"
    typesense_connection_timeout: float = 2.0
    typesense_read_timeout: float = 10.0

    hybrid_alpha: float = 0.5
    default_limit: int = 10

    # Group classification
    group_collection: str = "structure_output_groups"
    group_vector_field: str = "embedding_clip"
    group_label_field: str = "used_for"
    group_exclude_fields: str = "embedding_text,embedding_clip"
    classification_neighbors: int = 2
    caption_max_chars: int = 200
    text_weight: float = 1.0
    image_weight: float = 1.2
    single_source_threshold: float = 0.66
    multi_source_threshold: float = 1.3
    default_group: str = "general"

    class Config:
        env_file = ".env"
        extra = "ignore"
        frozen = True

    @property
    def typesense_base_url(self) -> str:
        path = self.typesense_path.strip("/")
        base = f"{self.typesense_protocol}://{self.typesense_host}:{self.typesense_port}"
        return f"{base}/{path}" if path else base


settings = Settings()
