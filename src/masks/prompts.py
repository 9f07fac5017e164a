"""
Edit prompts used to synthesize controlled variants of a base image.

Each prompt changes only the category attribute and asks the model to keep
the person, pose, background and lighting identical.
"""

from typing import Dict, List

from recs.models import Category


VARIANT_PROMPTS: Dict[str, List[str]] = {
    Category.APPAREL.value: [
        "Change the clothing to business casual (blazer and trousers). Keep the same person, face, hair, pose, background, and lighting. Only change the clothing.",
        "Change the clothing to minimalist casual (plain t-shirt and straight-leg pants). Keep everything else identical; only change the clothing.",
        "Change the clothing to sporty athleisure (hoodie and joggers). Keep the same identity/background/lighting; only change the outfit.",
        "Change the clothing to 90s retro streetwear (oversized denim jacket). Keep everything else the same; only change the clothing.",
        "Change the clothing to bohemian chic (flowy patterned dress). Keep the same person and scene; only change the clothing.",
        "Change the clothing to formal evening wear (tailored suit or elegant dress). Keep everything else identical; only change the clothing.",
    ],
    Category.EYEWEAR.value: [
        "Change the eyewear to bold oversized square eyeglasses frames in matte black. Keep the same person, face, hair, pose, background, and lighting. Only change the eyewear.",
        "Change the eyewear to classic round panto eyeglasses frames in polished gold. Keep everything else identical; only change the eyewear.",
        "Change the eyewear to modern cat-eye eyeglasses frames in deep navy blue. Keep the same identity and scene; only change the eyewear.",
        "Change the eyewear to minimalist titanium wire eyeglasses frames in brushed silver. Keep everything else the same; only change the eyewear.",
        "Change the eyewear to elegant acetate eyeglasses frames in crystal clear. Keep the same person and background; only change the eyewear.",
    ],
}


def variant_prompts(category: str) -> List[str]:
    try:
        return list(VARIANT_PROMPTS[category])
    except KeyError:
        raise ValueError(f"No variant prompts for category: {category}") from None


def plan_variant_prompts(category: str, count: int) -> List[str]:
    """Cycle the category prompts to `count` entries."""
    prompts = variant_prompts(category)
    return [prompts[i % len(prompts)] for i in range(count)]
