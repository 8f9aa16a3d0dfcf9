import asyncio
import logging
from filmroom.config import settings
from filmroom.database.supabase_client import get_service_supabase
from filmroom.modules.games.service import GameService

logger = logging.getLogger(__name__)


async def lock_expired_games(supabase=None) -> int:
    """Lock games past their retention window and remove their film. Returns games locked."""
    locked = 0
    try:
        game_service = GameService(supabase or get_service_supabase())
        expired_games = game_service.get_expired_games()
        if not expired_games:
            logger.debug("No expired games found")
            return 0
        logger.info(f"Found {len(expired_games)} expired game(s) to lock")
        for game in expired_games:
            try:
                game_service.lock_expired_game(game)
                locked += 1
            except Exception as e:
                logger.error(f"Error locking expired game {game['id']}: {str(e)}")
    except Exception as e:
        logger.error(f"Error in retention scheduler: {str(e)}")
    return locked


async def retention_scheduler_loop():
    """Background task that periodically locks expired games"""
    while True:
        try:
            await lock_expired_games()
        except Exception as e:
            logger.error(f"Error in retention scheduler loop: {str(e)}")

        await asyncio.sleep(settings.retention_check_interval_seconds)
