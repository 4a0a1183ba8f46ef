# brainquest/utils/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file before defining settings
load_dotenv()

_PACKAGE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    # Storage
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./brainquest.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Static content
    template_dir: str = str(_PACKAGE_DIR / "data" / "templates")

    # Scoring
    base_xp: int = 10
    incorrect_xp: int = 2 # Consolation reward, independent of timing and streak

    # Leveling
    max_level: int = 100

    # Quiz sessions
    quiz_time_limit: int = 30 # Seconds per generated question
    default_question_count: int = 10
    default_difficulty: int = 2
    feedback_prompt_every: int = 5 # Ask for feedback on every Nth completed session
    closed_session_ttl: int = 600 # Seconds a finished quiz or battle stays reachable for results and retry

    # Boss battles
    boss_time_limit: int = 30
    player_max_hp: int = 100
    player_damage: int = 15 # HP lost by the player per wrong answer

    class Config:
        env_file_encoding = 'utf-8'

settings = Settings()

# --- Sanity checks on numeric settings ---
if settings.player_damage <= 0 or settings.player_max_hp <= 0:
    raise ValueError("PLAYER_DAMAGE and PLAYER_MAX_HP must both be positive")
if settings.feedback_prompt_every <= 0:
    raise ValueError("FEEDBACK_PROMPT_EVERY must be a positive integer")
if settings.closed_session_ttl < 0:
    raise ValueError("CLOSED_SESSION_TTL cannot be negative")
if not 1 <= settings.default_difficulty <= 5:
    raise ValueError("DEFAULT_DIFFICULTY must lie between 1 and 5")
