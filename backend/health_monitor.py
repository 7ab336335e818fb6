import os
import time
import logging
from typing import Dict, Tuple

import redis
import requests

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("HealthMonitor")


CONSOLE_URL = os.getenv("CONSOLE_URL", "http://localhost:8000")
RESORT_API_URL = os.getenv("RESORT_API_URL", "http://localhost:3001/api").rstrip("/")
REDIS_HOST = os.getenv("REDIS_HOST", "redis")
CHECK_INTERVAL = int(os.getenv("HEALTH_CHECK_INTERVAL", "60"))


def _detect_redis_port() -> int:
    raw = os.getenv("REDIS_PORT") or os.getenv("REDIS_SERVICE_PORT") or "6379"
    try:
        return int(raw)
    except ValueError:
        # k8s style "tcp://10.0.0.1:6379"
        if ":" in raw:
            try:
                return int(raw.rsplit(":", 1)[1])
            except ValueError:
                pass

    return 6379


REDIS_PORT = _detect_redis_port()


def check_http_service(name: str, url: str, timeout: float = 5.0) -> Tuple[bool, str]:
    try:
        resp = requests.get(url, timeout=timeout)
        if resp.ok:
            return True, f"{name}: OK ({resp.status_code})"
        return False, f"{name}: FAIL ({resp.status_code})"
    except requests.RequestException as e:
        return False, f"{name}: ERROR ({e})"


def check_console() -> Tuple[bool, str]:
    return check_http_service("console /health", f"{CONSOLE_URL}/health")


def check_resort_api() -> Tuple[bool, str]:
    # the resort API has no health route; any HTTP answer means it is up
    try:
        resp = requests.get(RESORT_API_URL, timeout=5.0)
        return True, f"resort-api: OK ({resp.status_code})"
    except requests.RequestException as e:
        return False, f"resort-api: ERROR ({e})"


def check_redis() -> Tuple[bool, str]:
    try:
        r = redis.Redis(host=REDIS_HOST, port=REDIS_PORT, decode_responses=True)
        r.ping()
        return True, "redis: OK"
    except redis.RedisError as e:
        return False, f"redis: ERROR ({e})"


def monitor_all_services() -> Dict[str, bool]:
    checks = {
        "console": check_console,
        "resort_api": check_resort_api,
        "redis": check_redis,
    }

    results: Dict[str, bool] = {}
    logger.info("=" * 60)
    logger.info("Health check results:")

    for name, func in checks.items():
        ok, message = func()
        results[name] = ok
        if ok:
            logger.info(f"[OK ] {message}")
        else:
            logger.warning(f"[FAIL] {message}")

    logger.info("=" * 60)
    return results


if __name__ == "__main__":
    logger.info("Health Monitor Service Started")
    logger.info("Waiting 15 seconds before first check to let services start...")
    time.sleep(15)

    logger.info(f"Checking services every {CHECK_INTERVAL} seconds...")

    while True:
        try:
            monitor_all_services()
        except Exception as e:
            logger.error(f"Error during monitoring: {e}")
        logger.info(f"Next check in {CHECK_INTERVAL} seconds...")
        time.sleep(CHECK_INTERVAL)
