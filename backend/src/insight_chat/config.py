import os
from typing import Optional, Dict, Any, List
import yaml
from pydantic import BaseModel


CONFIG_ENV_VAR = "INSIGHT_CHAT_CONFIG"


class Settings(BaseModel):
    # LLM Settings
    provider: str = "gemini"
    model_name: str = "gemini-1.5-flash"
    default_model: str = "gemini-pro"
    fallback_models: List[str] = ["gemini-1.0-pro", "gemini-pro-001"]
    temperature: float = 0.3
    max_tokens: int = 1024
    api_key_env: List[str] = ["GOOGLE_API_KEY", "GEMINI_API_KEY"]

    # Database
    duckdb_path: str = "./data/ecommerce.duckdb"

    # Conversation
    history_limit: int = 20
    response_history_turns: int = 20
    history_line_chars: int = 100
    sample_rows: int = 3

    # Charts
    render_charts: bool = False
    charts_dir: str = "./charts"

    # API
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    # Raw nested sections (optional)
    llm: Optional[Dict[str, Any]] = None

    @property
    def model_fallbacks(self) -> List[str]:
        """Models tried, in order, after the primary model is rejected."""
        models = [self.default_model, *self.fallback_models]
        return [m for i, m in enumerate(models) if m and m not in models[:i]]

    @classmethod
    def from_yaml(cls, yaml_path: Optional[str] = None) -> 'Settings':
        if yaml_path is None:
            yaml_path = os.getenv(CONFIG_ENV_VAR) or os.path.join(
                os.path.dirname(__file__), '../../config/config.yaml'
            )
            if not os.path.exists(yaml_path):
                # Installed without the repo checkout: built-in defaults
                return cls()

        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

settings = Settings.from_yaml()
