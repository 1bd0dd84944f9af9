"""
Script để chạy Watchly API với uvicorn.
"""
import uvicorn
import os

if __name__ == "__main__":
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))

    # Chỉ dùng reload trong development
    is_development = os.getenv("ENVIRONMENT", "development").lower() == "development"

    print("\n" + "=" * 60)
    if is_development:
        print("🚀 Đang khởi động Watchly API (Development)...")
    else:
        print("🚀 Đang khởi động Watchly API (Production)...")
    print(f"📍 API URL:  http://{host}:{port}")
    print(f"📚 API Docs: http://{host}:{port}/docs")
    print("=" * 60 + "\n")

    uvicorn.run(
        "watchly.main:app",
        host=host,
        port=port,
        reload=is_development,
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )
