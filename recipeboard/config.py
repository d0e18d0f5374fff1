import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_DAYS = int(os.getenv("TOKEN_EXPIRY_DAYS", 30))

# "postgres" or "memory"
STORE_BACKEND = os.getenv("STORE_BACKEND", "postgres")

# Signing secret of the identity provider webhook endpoint ("whsec_...").
WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET", "")

# Seconds, used by the board client.
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", 10))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


# DATABASE_URL, when set, wins over the individual DATABASE_* settings.
def database_params():
    url = os.getenv("DATABASE_URL")
    if url:
        return {"dsn": url}
    return {
        "host": os.getenv("DATABASE_HOST", "localhost"),
        "port": int(os.getenv("DATABASE_PORT", 5432)),
        "user": os.getenv("DATABASE_USER", "postgres"),
        "password": os.getenv("DATABASE_PASSWORD", "postgres"),
        "dbname": os.getenv("DATABASE_NAME", "postgres"),
    }


def database_url():
    if os.getenv("DATABASE_URL"):
        return os.environ["DATABASE_URL"]
    params = database_params()
    return (
        f"postgresql://{quote_plus(params['user'])}:"
        f"{quote_plus(params['password'])}@"
        f"{params['host']}:{params['port']}/{params['dbname']}"
    )
