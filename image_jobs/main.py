import logging
import os

from flask import Flask

from image_jobs.api.webhook import api
from image_jobs.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s:%(message)s"


def create_app() -> Flask:
    """
    Build the Flask app. Settings are loaded here so a missing
    SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY / OPENAI_API_KEY stops the
    process at startup with a ConfigError.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = Flask(__name__)
    app.register_blueprint(api)
    logging.info("[STARTUP] jobs table: %s", settings.jobs_table)
    return app


# ================================
# START
# ================================
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 10000))
    create_app().run(host="0.0.0.0", port=port)
