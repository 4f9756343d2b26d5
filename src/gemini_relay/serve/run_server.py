"""Launch the relay's FastAPI app with uvicorn."""
from __future__ import annotations
import os

import uvicorn

def main() -> None:
    host = os.getenv("RELAY_HOST", "0.0.0.0")
    port = int(os.getenv("RELAY_PORT", "8000"))
    uvicorn.run(
        "gemini_relay.serve.fastapi_app:app",
        host=host,
        port=port,
        log_config=None,
    )

if __name__ == "__main__":
    main()
