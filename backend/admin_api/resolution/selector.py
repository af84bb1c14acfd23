from typing import Optional, Sequence

THEME_SYNONYMS = {
    "dogs": "dog",
    "dog": "dog",
    "dinosaurs": "dinosaur",
    "dinosaur": "dinosaur",
    "cats": "cat",
    "cat": "cat",
    "adventures": "adventure",
    "adventure": "adventure",
}


def normalize_theme(theme: Optional[str]) -> str:
    """Collapse plural/singular theme labels; anything else is lower-cased."""
    normalized = (theme or "").strip().lower()
    return THEME_SYNONYMS.get(normalized, normalized)


def asset_theme(asset) -> str:
    meta = asset.metadata_info or {}
    return meta.get("theme") or asset.theme or ""


def is_personalized_for_other(asset, child_name: Optional[str]) -> bool:
    """True when the asset carries a different child's name."""
    if child_name is None:
        return False
    owner = ((asset.metadata_info or {}).get("child_name") or "").strip()
    return bool(owner) and owner != child_name.strip()


def select_asset(candidates: Sequence, theme: Optional[str], child_name: Optional[str] = None):
    """
    Pick one asset for a slot.

    Candidates keep fetch order. The first theme match wins; without one the
    first candidate wins. Assets personalized for another child are never
    eligible.
    """
    eligible = [asset for asset in candidates if not is_personalized_for_other(asset, child_name)]
    if not eligible:
        return None

    wanted = normalize_theme(theme)
    for asset in eligible:
        if normalize_theme(asset_theme(asset)) == wanted:
            return asset
    return eligible[0]
