"""
Prompt builders

Turn the free-text form fields into instructions for the text and image
collaborators. Only the fields the user filled in are included; when nothing
usable is given the builders return an empty string so callers can keep
their actions disabled.
"""

from dataclasses import dataclass
from typing import List

from .compositor import CompositeMode


@dataclass
class PromptFields:
    """Free-text inputs collected from the main window."""
    site_description: str = ''
    play_ideas: str = ''
    vulnerability: str = ''
    location: str = ''
    image_description: str = ''
    language: str = ''


def _clean(text: str) -> str:
    return ' '.join((text or '').split())


def _sentence(text: str) -> str:
    text = _clean(text)
    if text and text[-1] not in '.!?':
        text += '.'
    return text


def _language_clause(language: str) -> str:
    language = _clean(language)
    return f" Respond in {language}." if language else ''


def build_suggestion_prompt(site_description: str, play_ideas: str = '', language: str = '') -> str:
    """Ask the text generator to add or adapt a playful idea for the site."""
    site = _clean(site_description)
    ideas = _clean(play_ideas)
    if not site and not ideas:
        return ''

    parts: List[str] = ["Add or adapt a playful feature for this place."]
    if site:
        parts.append(f"The place: {_sentence(site)}")
    if ideas:
        parts.append(f"Ideas so far: {_sentence(ideas)}")
    return ' '.join(parts) + _language_clause(language)


def build_vulnerability_prompt(site_description: str, vulnerability: str, language: str = '') -> str:
    """Ask the text generator to describe a climate vulnerability of the site."""
    vulnerability = _clean(vulnerability)
    if not vulnerability:
        return ''

    parts = [f"Describe the vulnerability: {_sentence(vulnerability)}"]
    site = _clean(site_description)
    if site:
        parts.append(f"The place: {_sentence(site)}")
    return ' '.join(parts) + _language_clause(language)


def build_concept_prompt(fields: PromptFields, mode: CompositeMode = CompositeMode.COMPOSITE) -> str:
    """
    Assemble the image-generation instruction.

    Args:
        fields: Form fields
        mode: Decides how the sketch is referenced

    Returns:
        Instruction text, or '' if neither a site, ideas nor a vulnerability is given
    """
    site = _clean(fields.site_description)
    ideas = _clean(fields.play_ideas)
    vulnerability = _clean(fields.vulnerability)
    if not (site or ideas or vulnerability):
        return ''

    parts = ["Turn this place into a climate-adaptive playful environment."]
    location = _clean(fields.location)
    if location:
        parts.append(f"Location: {_sentence(location)}")
    if site:
        parts.append(f"Site: {_sentence(site)}")
    description = _clean(fields.image_description)
    if description:
        parts.append(f"The photo shows: {_sentence(description)}")
    if ideas:
        parts.append(f"Add: {_sentence(ideas)}")
    if vulnerability:
        parts.append(f"Address this climate vulnerability: {_sentence(vulnerability)}")

    if mode == CompositeMode.INPAINTING:
        parts.append("Only change the marked area and keep everything else as it is.")
    else:
        parts.append("Follow the sketched shapes and colors for placement.")

    parts.append("Use locally sourced natural materials and native vegetation.")
    return ' '.join(parts)


__all__ = [
    'PromptFields',
    'build_suggestion_prompt',
    'build_vulnerability_prompt',
    'build_concept_prompt',
]
