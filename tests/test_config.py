from sentinel.webhook_ingest.config import WebhookIngestConfig

ENV_VARS = [
    "GITHUB_WEBHOOK_SECRET",
    "SENTINEL_WEBHOOK_ENDPOINT",
    "SENTINEL_HOST",
    "SENTINEL_PORT",
    "SENTINEL_LOG_DIR",
    "LOG_LEVEL",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_PASSWORD",
    "SENTINEL_QUEUE_NAME",
    "SENTINEL_DEFAULT_PRIORITY",
]


def test_defaults(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    cfg = WebhookIngestConfig.from_env()

    assert cfg.webhook_secret == ""
    assert cfg.webhook_endpoint == "/webhook/github"
    assert cfg.redis_host == "localhost"
    assert cfg.redis_port == 6379
    assert cfg.redis_password is None
    assert cfg.queue_name == "security-analysis"
    assert cfg.default_priority == 5


def test_from_env(monkeypatch):
    monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "s3cret")
    monkeypatch.setenv("SENTINEL_WEBHOOK_ENDPOINT", "/hooks/github")
    monkeypatch.setenv("SENTINEL_PORT", "8081")
    monkeypatch.setenv("REDIS_HOST", "redis.internal")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_PASSWORD", "hunter2")
    monkeypatch.setenv("SENTINEL_QUEUE_NAME", "security-analysis-staging")
    monkeypatch.setenv("SENTINEL_DEFAULT_PRIORITY", "3")

    cfg = WebhookIngestConfig.from_env()

    assert cfg.webhook_secret == "s3cret"
    assert cfg.webhook_endpoint == "/hooks/github"
    assert cfg.port == 8081
    assert cfg.redis_host == "redis.internal"
    assert cfg.redis_port == 6380
    assert cfg.redis_password == "hunter2"
    assert cfg.queue_name == "security-analysis-staging"
    assert cfg.default_priority == 3


def test_empty_redis_password_is_none(monkeypatch):
    monkeypatch.setenv("REDIS_PASSWORD", "")
    assert WebhookIngestConfig.from_env().redis_password is None
