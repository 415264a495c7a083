import os
from unittest.mock import patch


class TestRedisSettings:
    def test_redis_default_values(self):
        from calma.config import RedisSettings

        with patch.dict(os.environ, {}, clear=True):
            settings = RedisSettings()
            assert settings.host == "redis"
            assert settings.port == 6379
            assert settings.password == ""
            assert settings.max_connections == 50

    def test_redis_from_environment(self):
        from calma.config import RedisSettings

        env = {"REDIS_HOST": "cache", "REDIS_PORT": "6380", "REDIS_PASSWORD": "s3cret"}
        with patch.dict(os.environ, env, clear=True):
            settings = RedisSettings()
            assert settings.host == "cache"
            assert settings.port == 6380
            assert settings.password == "s3cret"


class TestPostgresSettings:
    def test_postgres_default_values(self):
        from calma.config import PostgresSettings

        with patch.dict(os.environ, {}, clear=True):
            settings = PostgresSettings()
            assert settings.host == "postgres"
            assert settings.user == "calma"
            assert settings.database == "calma"

    def test_postgres_dsn_generation(self):
        from calma.config import PostgresSettings

        env = {
            "POSTGRES_HOST": "dbhost",
            "POSTGRES_PORT": "5433",
            "POSTGRES_USER": "myuser",
            "POSTGRES_PASSWORD": "mypass",
            "POSTGRES_DB": "mydb",
        }
        with patch.dict(os.environ, env, clear=True):
            dsn = PostgresSettings().get_dsn()
            assert "host=dbhost" in dsn
            assert "port=5433" in dsn
            assert "user=myuser" in dsn
            assert "password=mypass" in dsn
            assert "dbname=mydb" in dsn


class TestCorsSettings:
    def test_cors_default_values(self):
        from calma.config import CorsSettings

        with patch.dict(os.environ, {}, clear=True):
            settings = CorsSettings()
            assert settings.origins == ["http://localhost:3000"]
            assert settings.allow_credentials is True

    def test_cors_wildcard_disables_credentials(self):
        from calma.config import CorsSettings

        with patch.dict(os.environ, {"CORS_ORIGINS": "*"}, clear=True):
            settings = CorsSettings()
            assert settings.origins == ["*"]
            assert settings.allow_credentials is False

    def test_cors_multiple_origins(self):
        from calma.config import CorsSettings

        with patch.dict(os.environ, {"CORS_ORIGINS": "https://a.example, https://b.example,"}, clear=True):
            assert CorsSettings().origins == ["https://a.example", "https://b.example"]


class TestBookingSettings:
    def test_defaults(self):
        from calma.config import BookingSettings

        with patch.dict(os.environ, {}, clear=True):
            policy = BookingSettings().policy()
            assert policy.min_notice_minutes == 60
            assert policy.horizon_days == 30

    def test_from_environment(self):
        from calma.config import BookingSettings

        env = {"BOOKING_MIN_NOTICE_MINUTES": "120", "BOOKING_HORIZON_DAYS": "14"}
        with patch.dict(os.environ, env, clear=True):
            policy = BookingSettings().policy()
            assert policy.min_notice_minutes == 120
            assert policy.horizon_days == 14


class TestGoogleSettings:
    def test_not_configured_by_default(self):
        from calma.config import GoogleSettings

        with patch.dict(os.environ, {}, clear=True):
            assert GoogleSettings().configured is False

    def test_configured(self):
        from calma.config import GoogleSettings

        env = {"GOOGLE_CLIENT_ID": "cid", "GOOGLE_CLIENT_SECRET": "secret", "ENCRYPTION_KEY": "ab" * 32}
        with patch.dict(os.environ, env, clear=True):
            settings = GoogleSettings()
            assert settings.configured is True
            assert settings.client_id == "cid"
            assert settings.encryption_key == "ab" * 32


class TestAppSettings:
    def test_booking_url(self):
        from calma.config import AppSettings

        with patch.dict(os.environ, {"APP_URL": "https://calma.example/"}, clear=True):
            settings = AppSettings()
            assert settings.booking_url("ada") == "https://calma.example/book/ada"
            assert settings.booking_url("ada", "intro") == "https://calma.example/book/ada/intro"


class TestSettings:
    def test_settings_singleton_pattern(self):
        from calma.config import clear_settings_cache, get_settings

        clear_settings_cache()
        assert get_settings() is get_settings()

    def test_settings_has_all_subsections(self):
        from calma.config import get_settings

        settings = get_settings()
        for section in ("redis", "postgres", "cors", "debug", "features", "booking", "google", "app"):
            assert hasattr(settings, section)

    def test_debug_settings(self):
        from calma.config import DebugSettings

        with patch.dict(os.environ, {"REQUEST_DEBUG": "1", "REDIS_DEBUG": "true"}, clear=True):
            settings = DebugSettings()
            assert settings.request is True
            assert settings.redis is True

    def test_feature_flags(self):
        from calma.config import FeatureSettings

        with patch.dict(os.environ, {"ENABLE_DB": "0", "ENABLE_REDIS": "no"}, clear=True):
            settings = FeatureSettings()
            assert settings.db is False
            assert settings.redis is False

        with patch.dict(os.environ, {}, clear=True):
            settings = FeatureSettings()
            assert settings.db is True
            assert settings.redis is True
