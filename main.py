"""
Campus Chatbot API - server entrypoint.

Run with `python main.py` or `uvicorn main:app --reload --port 8080`.
"""
import os

from campus_chatbot.server import app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        reload=os.getenv("APP_ENV", "production").lower() == "development",
    )
