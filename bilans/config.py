"""Configuration : variables d'environnement (.env) et barèmes prédéfinis (YAML)."""

import logging
import os
from dataclasses import dataclass
from typing import List
import yaml
from dotenv import load_dotenv

from bilans.core.bareme import DEFAULT_PRESET_PATH, BaremePreset, default_preset
from bilans.core.reports import DEFAULT_EXAM_TITLE

logger = logging.getLogger(__name__)

PRESETS_DIR = os.path.dirname(DEFAULT_PRESET_PATH)

DEFAULT_DATA_DIR = ".bilans"
DEFAULT_PRESET = "bb1_2025"


@dataclass
class Settings:
    """Paramètres de l'application."""
    data_dir: str = DEFAULT_DATA_DIR
    preset: str = DEFAULT_PRESET
    exam_title: str = DEFAULT_EXAM_TITLE


def get_settings() -> Settings:
    """Lit les paramètres depuis l'environnement (et le fichier .env s'il existe)."""
    load_dotenv()
    return Settings(
        data_dir=os.getenv("BILANS_DATA_DIR", DEFAULT_DATA_DIR),
        preset=os.getenv("BILANS_PRESET", DEFAULT_PRESET),
        exam_title=os.getenv("BILANS_EXAM_TITLE", DEFAULT_EXAM_TITLE),
    )


def available_presets(presets_dir: str = PRESETS_DIR) -> List[str]:
    """Noms des barèmes prédéfinis disponibles."""
    if not os.path.isdir(presets_dir):
        return []
    return sorted(
        os.path.splitext(f)[0]
        for f in os.listdir(presets_dir)
        if f.endswith((".yaml", ".yml"))
    )


def load_preset(name: str = DEFAULT_PRESET, presets_dir: str = PRESETS_DIR) -> BaremePreset:
    """
    Charge un barème prédéfini depuis son fichier YAML.

    Args:
        name: Nom du fichier sans extension (ex: "bb1_2025")
        presets_dir: Répertoire des barèmes

    Returns:
        Le barème, ou le barème embarqué si le fichier n'existe pas
    """
    preset_path = os.path.join(presets_dir, f"{name}.yaml")
    try:
        with open(preset_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Barème '%s' introuvable (%s), barème embarqué utilisé", name, preset_path)
        return default_preset()

    return BaremePreset.from_dict(data)
