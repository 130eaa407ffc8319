# agroagent/config.py
import os

from dotenv import load_dotenv

load_dotenv()

# Front-end targets
BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")
GATEWAY_URL = os.getenv("GATEWAY_URL", "http://127.0.0.1:8001")
GATEWAY_PUBLIC_KEY = os.getenv("GATEWAY_PUBLIC_KEY", "")

# Upstream multimodal completion service
AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
AI_GATEWAY_API_KEY = os.getenv("AI_GATEWAY_API_KEY")
AI_MODEL = os.getenv("AI_MODEL", "google/gemini-2.5-flash")
AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", "1000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
