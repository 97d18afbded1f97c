from __future__ import annotations

import xml.etree.ElementTree as ET

from ..assembler import NotificationDocument
from ..resolver import TextBlock


BLOCK_STYLES = {
    "title": "title",
    "body1": "body",
    "body2": "body",
}


def render_toast_xml(document: NotificationDocument) -> str:
    """Serialize a document as ToastGeneric markup."""
    toast = ET.Element("toast", {"scenario": document.scenario_style})
    visual = ET.SubElement(toast, "visual")
    binding = ET.SubElement(visual, "binding", {"template": "ToastGeneric"})

    if document.hero_image:
        ET.SubElement(binding, "image", {"placement": "hero", "src": document.hero_image})
    if document.logo_image:
        ET.SubElement(
            binding,
            "image",
            {"id": "1", "placement": "appLogoOverride", "hint-crop": "circle", "src": document.logo_image},
        )
    ET.SubElement(binding, "text", {"placement": "attribution"}).text = document.attribution
    ET.SubElement(binding, "text").text = document.header

    for block in document.blocks:
        _append_block(binding, block)

    actions = ET.SubElement(toast, "actions")
    for action in document.actions:
        if action.kind == "snooze":
            _append_snooze_input(actions, action)
    for action in document.actions:
        attrs = {
            "activationType": action.activation_type,
            "arguments": action.arguments,
            "content": action.label,
        }
        if action.kind == "snooze":
            attrs["hint-inputId"] = "snoozeTime"
        ET.SubElement(actions, "action", attrs)

    if document.audio_silent:
        ET.SubElement(toast, "audio", {"silent": "true"})
    else:
        ET.SubElement(toast, "audio", {"src": "ms-winsoundevent:Notification.Default"})

    return ET.tostring(toast, encoding="unicode")


def _append_block(binding: ET.Element, block: TextBlock) -> None:
    group = ET.SubElement(binding, "group")
    subgroup = ET.SubElement(group, "subgroup")
    if block.heading:
        ET.SubElement(subgroup, "text", {"hint-style": "base", "hint-align": "left"}).text = block.heading
        ET.SubElement(subgroup, "text", {"hint-style": "caption", "hint-align": "left"}).text = block.text
        return
    style = BLOCK_STYLES.get(block.kind, "body")
    ET.SubElement(subgroup, "text", {"hint-style": style, "hint-wrap": "true"}).text = block.text


def _append_snooze_input(actions: ET.Element, action) -> None:
    default = str(action.options[0].minutes) if action.options else ""
    attrs = {"id": "snoozeTime", "type": "selection", "defaultInput": default}
    if action.prompt:
        attrs["title"] = action.prompt
    selection = ET.SubElement(actions, "input", attrs)
    for option in action.options:
        ET.SubElement(selection, "selection", {"id": str(option.minutes), "content": option.label})
