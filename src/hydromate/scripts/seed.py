"""
Seed the database with the default drink catalogue and settings.

Safe to re-run: existing drinks are kept and saved settings are written
back unchanged.

Usage:
    python -m hydromate seed
    python -m hydromate.scripts.seed   (direct invocation)
"""
from hydromate.config import get_settings
from hydromate.db.engine import get_engine
from hydromate.tracking.repository import DrinkRepository, SettingsRepository


def run_seed(engine=None) -> int:
    """
    Returns:
        Number of drinks inserted.
    """
    engine = engine or get_engine()

    inserted = DrinkRepository(engine).seed_defaults()
    settings = SettingsRepository(engine, user_id=get_settings().user_id)
    settings.save(settings.get())

    print(f"💧 Seeded {inserted} drinks. Settings saved.")
    return inserted


if __name__ == "__main__":
    run_seed()
