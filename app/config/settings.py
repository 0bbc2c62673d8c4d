# app/config/settings.py
# Runtime configuration loaded from the environment

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings read from environment variables"""

    DATABASE = {
        'url': os.getenv('DATABASE_URL', 'sqlite:///./taskflow.db'),
        # Only applied to PostgreSQL URLs
        'sslmode': os.getenv('DB_SSLMODE', 'prefer'),
        'echo': os.getenv('DB_ECHO', 'false').lower() == 'true',
    }

    AUTH = {
        'secret_key': os.getenv('SECRET_KEY', 'change-me-in-production'),
        'algorithm': os.getenv('ALGORITHM', 'HS256'),
        'access_token_expire_minutes': int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 7 * 24 * 60)),
        'password_min_length': int(os.getenv('PASSWORD_MIN_LENGTH', 6)),
    }

    SEED_ADMIN = {
        'name': os.getenv('SEED_ADMIN_NAME', 'Super Admin'),
        'email': os.getenv('SEED_ADMIN_EMAIL', 'admin@taskflow.io'),
        'password': os.getenv('SEED_ADMIN_PASSWORD', 'Admin@123'),
    }

    TASKS = {
        'max_attachments': int(os.getenv('MAX_ATTACHMENTS', 10)),
        'default_page_size': int(os.getenv('DEFAULT_PAGE_SIZE', 10)),
        'max_page_size': int(os.getenv('MAX_PAGE_SIZE', 100)),
    }

    SERVER = {
        'host': os.getenv('HOST', '0.0.0.0'),
        'port': int(os.getenv('PORT', '8000')),
        'reload': os.getenv('RELOAD', 'true').lower() == 'true',
        'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
    }

    @classmethod
    def get_cors_origins(cls) -> list:
        """Comma separated CORS_ORIGINS plus the local development frontends"""
        origins = [
            "http://localhost:3000",
            "http://localhost:8080",
            "http://localhost:8081",
            "http://127.0.0.1:3000",
        ]
        extra = os.getenv('CORS_ORIGINS', '')
        origins.extend(o.strip() for o in extra.split(',') if o.strip())
        return origins

    @classmethod
    def is_postgres(cls) -> bool:
        return cls.DATABASE['url'].startswith(('postgresql', 'postgres'))

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE['url'].startswith('sqlite')


settings = Settings
