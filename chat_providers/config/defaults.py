"""chat_providers.config.defaults
==============================

Small, stable default values for the provider presets and the retrying
executor. Everything here can be overridden by the config file, environment
variables or explicit overrides (see ``chat_providers.config``).

Only plain constants live here; the module imports nothing from the rest of
the package so it can be read from anywhere without cycles.
"""

from __future__ import annotations

# ---- Provider presets ----
# Base URL, chat-completions path and default model per backend.

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com"
OPENAI_DEFAULT_CHAT_PATH = "/v1/chat/completions"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"

DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com"
DEEPSEEK_DEFAULT_CHAT_PATH = "/chat/completions"
DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"

QWEN_DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
QWEN_DEFAULT_CHAT_PATH = "/chat/completions"
QWEN_DEFAULT_MODEL = "qwen-plus"

KIMI_DEFAULT_BASE_URL = "https://api.moonshot.cn/v1"
KIMI_DEFAULT_CHAT_PATH = "/chat/completions"
KIMI_DEFAULT_MODEL = "moonshot-v1-8k"

# Ollama needs no API key; the local daemon serves the OpenAI dialect under /v1.
OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434"
OLLAMA_DEFAULT_CHAT_PATH = "/v1/chat/completions"
OLLAMA_DEFAULT_MODEL = "llama3.1"

SUPPORTED_PROVIDERS = ("openai", "deepseek", "qwen", "kimi", "ollama")


# ---- Retry defaults (``retry`` config section) ----
RETRY_DEFAULT_MAX_ATTEMPTS = 3
RETRY_DEFAULT_STATUSES = (408, 429, 500, 502, 503, 504)
RETRY_DEFAULT_BACKOFF_BASE = 0.2
RETRY_DEFAULT_BACKOFF_MAX = 3.0
RETRY_DEFAULT_JITTER = 0.2
RETRY_DEFAULT_MAX_RETRY_AFTER = 30.0


__all__ = [
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_CHAT_PATH",
    "OPENAI_DEFAULT_MODEL",
    "DEEPSEEK_DEFAULT_BASE_URL",
    "DEEPSEEK_DEFAULT_CHAT_PATH",
    "DEEPSEEK_DEFAULT_MODEL",
    "QWEN_DEFAULT_BASE_URL",
    "QWEN_DEFAULT_CHAT_PATH",
    "QWEN_DEFAULT_MODEL",
    "KIMI_DEFAULT_BASE_URL",
    "KIMI_DEFAULT_CHAT_PATH",
    "KIMI_DEFAULT_MODEL",
    "OLLAMA_DEFAULT_BASE_URL",
    "OLLAMA_DEFAULT_CHAT_PATH",
    "OLLAMA_DEFAULT_MODEL",
    "SUPPORTED_PROVIDERS",
    "RETRY_DEFAULT_MAX_ATTEMPTS",
    "RETRY_DEFAULT_STATUSES",
    "RETRY_DEFAULT_BACKOFF_BASE",
    "RETRY_DEFAULT_BACKOFF_MAX",
    "RETRY_DEFAULT_JITTER",
    "RETRY_DEFAULT_MAX_RETRY_AFTER",
]
