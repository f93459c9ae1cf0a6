from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # App
    debug: bool = False
    log_level: str = "INFO"

    # Repair costs: flat amount per unit when a work type has no grid entry
    default_repair_cost: Decimal = Decimal("150.00")
    repair_cost_zone: str = "france"

    # Classification policy
    # Age / lifespan ratio at which a defect counts as normal wear
    wear_ratio_threshold: Decimal = Decimal("0.5")
    misuse_keywords: list[str] = [
        "trou",
        "hole",
        "brûlure",
        "brulure",
        "burn",
        "cassé",
        "casse",
        "broken",
        "arraché",
        "torn",
        "fissure",
        "crack",
        "tache",
        "stain",
        "graffiti",
        "animal",
        "pet damage",
        "dégât des eaux",
        "water damage",
        "manquant",
        "missing",
    ]

    # Process state machine: reject non-adjacent status jumps
    strict_transitions: bool = False

    # Days before lease end that a process is triggered for unknown lease types
    default_trigger_days: int = 30


settings = Settings()
