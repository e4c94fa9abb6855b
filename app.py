"""Hugging Face Spaces entry point."""

from simulation_pages.config import Settings, configure_logging
from simulation_pages.page.models import load_bindings
from simulation_pages.visualization.dash_app import create_app

settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(load_bindings(*settings.model_modules), settings)

server = app.server  # expose Flask server for gunicorn fallback

if __name__ == "__main__":
    app.run(host=settings.host, debug=settings.debug, port=settings.port)
