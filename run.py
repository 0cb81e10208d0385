"""Local development entry point.

Usage:
    python run.py

Loads .env (DATABASE_URL, SECRET_KEY, LAYOUT_API_KEY, ...) before the app
is created, then serves the JSON API with the Flask dev server.
"""

import os

from dotenv import load_dotenv

load_dotenv()  # Load .env before anything else

from app import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5001))
    app.run(debug=True, host="0.0.0.0", port=port)
