# run_dev.py
import os
import sys
import socket


# 1) Carga .env si existe
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv(".env")


APP_MODULE = os.getenv("APP_MODULE", "minigram.main:app")


def _lan_ip() -> str:
    """Obtiene IP LAN real sin depender de hostname/DNS."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "127.0.0.1"


def main():
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    # RELOAD=0 para desactivarlo; por defecto activo salvo en Windows
    reload_env = os.getenv("RELOAD")
    if reload_env is not None:
        reload_flag = reload_env.strip() in ("1", "true", "True", "yes", "on")
    else:
        reload_flag = not sys.platform.startswith("win")

    print(f"🔗 API local: http://127.0.0.1:{port}")
    print(f"📱 API LAN:   http://{_lan_ip()}:{port}")
    print(f"🌀 reload={'ON' if reload_flag else 'OFF'}")

    uvicorn.run(
        APP_MODULE,
        host=host,
        port=port,
        reload=reload_flag,
        reload_dirs=["minigram"],
        reload_excludes=[".venv", ".git", "node_modules", "__pycache__"],
        timeout_keep_alive=30,
        timeout_graceful_shutdown=15,
        log_level=os.getenv("LOG_LEVEL", "info"),
        lifespan="on",
    )


if __name__ == "__main__":
    main()
