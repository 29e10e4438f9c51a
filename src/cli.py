import argparse

from loguru import logger
from sqlalchemy import create_engine

from src.config import get_settings
from src.db.database import Base

settings = get_settings()


def init_database():
    """初始化資料庫"""
    import src.models  # noqa: F401

    engine = create_engine(settings.sync_database_url)
    Base.metadata.create_all(engine)
    logger.info("Database initialized")


def run_notifications():
    """執行一次到期提醒"""
    from src.scheduler.jobs import run_expiry_notifications

    summary = run_expiry_notifications()
    logger.info(f"Result: {summary.as_dict()}")


def generate_vapid_keys():
    """產生 Web Push 用的 VAPID 金鑰"""
    from cryptography.hazmat.primitives import serialization
    from py_vapid import Vapid01
    from py_vapid.utils import b64urlencode

    vapid = Vapid01()
    vapid.generate_keys()

    public_key = vapid.public_key.public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    private_key = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")

    print(f"VAPID_PUBLIC_KEY={b64urlencode(public_key)}")
    print(f"VAPID_PRIVATE_KEY={b64urlencode(private_key)}")


def main():
    parser = argparse.ArgumentParser(description="Coupon Expiry Reminders CLI")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    subparsers.add_parser("init", help="Initialize database")

    # notify command
    subparsers.add_parser("notify", help="Run one expiry reminder cycle")

    # serve command
    subparsers.add_parser("serve", help="Start API server")

    # vapid command
    subparsers.add_parser("vapid", help="Generate a VAPID key pair")

    args = parser.parse_args()

    if args.command == "init":
        init_database()
    elif args.command == "notify":
        run_notifications()
    elif args.command == "serve":
        import uvicorn

        uvicorn.run(
            "src.main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.debug,
        )
    elif args.command == "vapid":
        generate_vapid_keys()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
