import uvicorn

from math_solver.config import Config


def main():
    """Start the API server."""
    uvicorn.run(
        "math_solver.main:app",
        host=Config.SERVER.HOST,
        port=Config.SERVER.PORT,
        log_level=Config.LOGGING.LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
