"""Allow ``python -m memory_router``."""

from memory_router.app import run

if __name__ == "__main__":
    run()
