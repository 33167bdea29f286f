"""Init-logik för paketet *tasks*.

• Laddar automatiskt projektets .env så att figma_proxy/codegen får
  FIGMA_TOKEN, FIGMA_CACHE_DIR, EXPORT_OUT_DIR m.fl. även när Celery
  eller CLI:t startas fristående.
"""

from pathlib import Path
from dotenv import load_dotenv, find_dotenv

# Leta upp .env uppåt i katalogträdet, annars försök i repo-roten
_env_path = find_dotenv(usecwd=True)
if not _env_path:
    # Om .env inte hittas, anta att den finns i projektroten (två steg upp från denna fil)
    _env_path = Path(__file__).resolve().parent.parent / ".env"

load_dotenv(_env_path, override=False)
