import logging
from nicegui import ui

from src.core import config_manager
from src.ui.scan import scan_page

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

@ui.page('/')
def index():
    scan_page()

if __name__ in {"__main__", "__mp_main__"}:
    if not config_manager.get_api_key():
        logger.warning(f"{config_manager.API_KEY_ENV} is not set; every analysis will fail until it is provided")
    ui.run(title="Ingredient Scanner", port=8080, reload=False)
