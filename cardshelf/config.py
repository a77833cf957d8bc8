import logging
import sys

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MySQL
    mysql_host: str = "127.0.0.1"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = "rootpwd"
    mysql_db: str = "cardshelf"

    # SQLite is the default store for local use
    use_sqlite: bool = True
    sqlite_path: str = "./cardshelf.db"

    # Paging
    default_page_size: int = 10
    max_page_size: int = 200
    recent_players_limit: int = 5

    # Error responses carry a stack trace when enabled
    debug: bool = False
    log_level: str = "INFO"

    # Client
    api_url: str = "http://127.0.0.1:8000"
    client_timeout: float = 10.0
    client_workers: int = 8

    class Config:
        env_file = ".env"
        env_prefix = "CARDSHELF_"


settings = Settings()


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("cardshelf")
    logger.setLevel(settings.log_level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


LOGGER = setup_logger()
