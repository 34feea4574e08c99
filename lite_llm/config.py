from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ollama backend
    ollama_base_url: str = "http://localhost:11434"

    # Logging
    lite_llm_log_level: str = "info"

    # HTTP client timeouts (seconds). Model pulls and generation are slow.
    lite_llm_http_connect_timeout: float = 5.0
    lite_llm_http_read_timeout: float = 300.0

    # External command timeout for hardware probes (seconds)
    lite_llm_command_timeout: float = 10.0

    # Pseudo-filesystem roots (override when reading a host mounted into a container)
    lite_llm_proc_root: str = "/proc"
    lite_llm_sys_root: str = "/sys"

    # Status watch mode
    lite_llm_status_interval: int = 5
    lite_llm_web_urls: str = "http://localhost:3000,http://localhost:8080"

    # Models pulled by `lite-llm models recommended` (sized for 8GB VRAM cards)
    lite_llm_recommended_models: str = (
        "llama3.1:8b-instruct-q4_K_M,mistral:7b-instruct-q4_K_M,gemma2:2b-instruct-q4_K_M"
    )

    # CORS
    lite_llm_cors_origins: str = "*"

    model_config = {"env_prefix": "", "case_sensitive": False, "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def web_urls(self) -> list[str]:
        return [u.strip() for u in self.lite_llm_web_urls.split(",") if u.strip()]

    @property
    def recommended_models(self) -> list[str]:
        return [m.strip() for m in self.lite_llm_recommended_models.split(",") if m.strip()]


settings = Settings()
