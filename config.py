import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Data file settings
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library.txt")  # relative to the working directory
    encoding: str = os.getenv("LIBRARY_ENCODING", "utf-8")

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library Bookkeeping")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
