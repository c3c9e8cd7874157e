"""Test environment: required settings get throwaway values before app import."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-only-0123456789")
os.environ.setdefault("JWT_EXPIRE_MINUTES", "60")
os.environ.setdefault("MAIL_HOST", "smtp.test.invalid")
os.environ.setdefault("MAIL_USERNAME", "helpdesk@test.invalid")
os.environ.setdefault("MAIL_PASSWORD", "test-mail-password")
