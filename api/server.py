import logging

from flask import Flask
from flask_cors import CORS

from core.config import API_HOST, API_PORT, LOG_LEVEL, SECRET_KEY
from routes.scripture_api import scripture_bp

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> Flask:
    app = Flask(__name__)
    app.config["SECRET_KEY"] = SECRET_KEY

    # Reader UI is served from a different origin
    CORS(app)

    app.register_blueprint(scripture_bp)
    return app


app = create_app()

if __name__ == "__main__":
    app.run(host=API_HOST, port=API_PORT)
