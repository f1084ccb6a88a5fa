"""wiki-intel server entry point."""

import os

import uvicorn
from dotenv import load_dotenv

# Load environment variables before the app reads its settings
load_dotenv()

if __name__ == "__main__":
    # Railway and similar platforms inject PORT; bind every interface when it is set
    host = os.getenv("API_HOST", "0.0.0.0" if os.getenv("PORT") else "127.0.0.1")
    port = int(os.getenv("PORT", 3000))
    debug = os.getenv("DEBUG", "false").lower() == "true"

    print(f"wiki-intel running on port {port}")
    uvicorn.run("wiki_intel.main:app", host=host, port=port, reload=debug)
