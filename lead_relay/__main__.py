"""Run the relay with uvicorn: ``python -m lead_relay``."""

import uvicorn

from lead_relay.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "lead_relay.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
    )


if __name__ == "__main__":  # pragma: no cover - script entry point
    main()
