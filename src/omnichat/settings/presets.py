"""Known provider endpoints, models and the default system prompt."""

API_PRESETS: dict[str, dict[str, str]] = {
    "openai": {
        "name": "OpenAI",
        "url": "https://api.openai.com/v1/chat/completions",
    },
    "google": {
        "name": "Google Gemini",
        "url": "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
    },
    "anthropic": {
        "name": "Anthropic",
        "url": "https://api.anthropic.com/v1/messages",
    },
    "groq": {
        "name": "Groq (Fast)",
        "url": "https://api.groq.com/openai/v1/chat/completions",
    },
    "openrouter": {
        "name": "OpenRouter",
        "url": "https://openrouter.ai/api/v1/chat/completions",
    },
    "polza": {
        "name": "Polza AI",
        "url": "https://api.polza.ai/v1/chat/completions",
    },
    "deepseek": {
        "name": "DeepSeek",
        "url": "https://api.deepseek.com/chat/completions",
    },
    "ollama": {
        "name": "Ollama (Local)",
        "url": "http://localhost:11434/v1/chat/completions",
    },
}

DEFAULT_API_URL = API_PRESETS["openai"]["url"]

AVAILABLE_MODELS: list[dict[str, str]] = [
    {"id": "gpt-4o", "name": "GPT-4o", "provider": "OpenAI"},
    {"id": "gpt-4o-mini", "name": "GPT-4o Mini", "provider": "OpenAI"},
    {"id": "o1-preview", "name": "OpenAI o1 (Reasoning)", "provider": "OpenAI"},
    {"id": "o1-mini", "name": "OpenAI o1-mini (Fast)", "provider": "OpenAI"},
    {"id": "gemini-1.5-pro", "name": "Gemini 1.5 Pro", "provider": "Google"},
    {"id": "gemini-1.5-flash", "name": "Gemini 1.5 Flash", "provider": "Google"},
    {"id": "gemini-2.0-flash-exp", "name": "Gemini 2.0 Flash (Preview)", "provider": "Google"},
    {"id": "llama-3.3-70b-versatile", "name": "Llama 3.3 70B (Groq)", "provider": "Groq"},
    {"id": "llama-3.1-8b-instant", "name": "Llama 3.1 8B (Groq)", "provider": "Groq"},
    {"id": "mixtral-8x7b-32768", "name": "Mixtral 8x7B (Groq)", "provider": "Groq"},
    {"id": "claude-3-5-sonnet-20241022", "name": "Claude 3.5 Sonnet", "provider": "Anthropic"},
    {"id": "claude-3-5-haiku-20241022", "name": "Claude 3.5 Haiku", "provider": "Anthropic"},
    {"id": "deepseek-chat", "name": "DeepSeek V3", "provider": "DeepSeek"},
    {"id": "deepseek-reasoner", "name": "DeepSeek R1 (Reasoning)", "provider": "DeepSeek"},
]

DEFAULT_SYSTEM_PROMPT = """You are an expert Senior Software Engineer and Architect.
You specialize in writing clean, efficient, and well-documented code.
When providing code, ALWAYS wrap it in markdown code blocks with the language specified.
If the response is long, structure it clearly with headers."""

# Used when the configured system prompt is blank
FALLBACK_SYSTEM_PROMPT = "You are a helpful assistant."

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7
