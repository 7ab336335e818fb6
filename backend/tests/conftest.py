import os

# Must be set before auth and redis_client are imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["REDIS_HOST"] = "127.0.0.1"
os.environ["REDIS_PORT"] = "1"
os.environ["UPSTREAM_WAIT_RETRIES"] = "0"
os.environ.setdefault("KITCHEN_COMPLETE_ROLES", "admin,kitchen")
