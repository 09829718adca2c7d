"""
App-level configuration.
Values come from environment variables (or a .env file next to the app)
so the AI backend can be swapped without touching the code.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# AI backend (FastAPI inference service) base URL
AI_BACKEND_URL = os.getenv("AI_BACKEND_URL", "https://tense-christy-ujjwal0704-a552bc8a.koyeb.app")

# Seconds to wait for the backend; uploads get more room for document parsing
AI_API_TIMEOUT = float(os.getenv("AI_API_TIMEOUT", "30"))
AI_UPLOAD_TIMEOUT = float(os.getenv("AI_UPLOAD_TIMEOUT", "120"))

# Media viewer geometry
DEFAULT_VIEWER_WIDTH = 800
DEFAULT_VIEWER_HEIGHT = 600
MIN_VIEWER_WIDTH = 300
MIN_VIEWER_HEIGHT = 200
MAX_VIEWPORT_FRACTION = 0.9  # rendered window never exceeds 90% of the viewport
OPEN_OFFSET_DIVISOR = 8  # window opens at viewport / 8 from the top-left corner

# Streamlit cannot read the browser size, so the app assumes a typical laptop viewport
VIEWPORT_WIDTH = int(os.getenv("VIEWPORT_WIDTH", "1440"))
VIEWPORT_HEIGHT = int(os.getenv("VIEWPORT_HEIGHT", "900"))
