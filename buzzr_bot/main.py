import asyncio
import logging
import sys

from pydantic import ValidationError

from .config import Settings
from .discord_client import BuzzrDiscordClient
from .models import create_engine, create_session_factory, init_schema
from .sessions import SessionRegistry
from .sms import SmsSender, TwilioSmsGateway
from .store import SubscriberStore


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    """Load settings, exiting with status 1 when required variables are missing."""
    try:
        return Settings()
    except ValidationError as exc:
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"])
            if error["type"] == "missing":
                logger.error("Missing required environment variable: %s", name)
            else:
                logger.error("Invalid environment variable %s: %s", name, error["msg"])
        raise SystemExit(1) from exc


async def init_app(settings: Settings) -> None:
    logging.getLogger().setLevel(settings.log_level.upper())

    engine = create_engine(settings.database_url)
    await init_schema(engine)
    store = SubscriberStore(create_session_factory(engine))
    registry = SessionRegistry(
        timeout=settings.signup_session_timeout_seconds,
        sweep_interval=settings.signup_sweep_interval_seconds,
    )
    gateway = TwilioSmsGateway(settings.twilio_account_sid, settings.twilio_auth_token)
    sms_sender = SmsSender(gateway, settings.twilio_phone_number)
    logger.info("Sending SMS from %s", sms_sender.from_number)

    discord_client = BuzzrDiscordClient(
        settings=settings,
        store=store,
        registry=registry,
        sms_sender=sms_sender,
    )
    try:
        await discord_client.start(settings.discord_bot_token)
    finally:
        logger.info("Shutting down bot...")
        await discord_client.close()
        await engine.dispose()


def main() -> None:
    settings = load_settings()
    try:
        asyncio.run(init_app(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, bot stopped")
        sys.exit(0)


if __name__ == "__main__":
    main()
