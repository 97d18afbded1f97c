from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import os
from typing import Any
import xml.etree.ElementTree as ET

import yaml


class Feature(str, Enum):
    UPGRADE_OS = "UpgradeOS"
    PENDING_REBOOT_UPTIME = "PendingRebootUptime"
    PENDING_REBOOT_CHECK = "PendingRebootCheck"
    RECENT_DEADLINE_CHECK = "RecentDeadlineCheck"


REBOOT_FEATURES = (
    Feature.UPGRADE_OS,
    Feature.PENDING_REBOOT_CHECK,
    Feature.PENDING_REBOOT_UPTIME,
)


class AppIdentity(str, Enum):
    SOFTWARE_CENTER = "SoftwareCenter"
    POWERSHELL = "PowerShellHost"


class ScenarioStyle(str, Enum):
    REMINDER = "reminder"
    SHORT = "short"
    LONG = "long"


class DeadlinePriority(str, Enum):
    AFTER_DEFAULT = "after_default"
    EXCLUSIVE = "exclusive"


@dataclass(frozen=True)
class SnoozeOption:
    minutes: int
    label: str


DEFAULT_SNOOZE_OPTIONS = (
    SnoozeOption(minutes=15, label="15 minutes"),
    SnoozeOption(minutes=60, label="1 hour"),
    SnoozeOption(minutes=240, label="4 hours"),
    SnoozeOption(minutes=480, label="8 hours"),
)


@dataclass(frozen=True)
class ActionButton:
    enabled: bool = True
    label: str = "Install"
    target: str = "ms-settings:windowsupdate"


@dataclass(frozen=True)
class DismissButton:
    enabled: bool = True
    label: str = "Dismiss"


@dataclass(frozen=True)
class SnoozeButton:
    enabled: bool = False
    label: str = "Snooze"
    prompt: str = "Click snooze to be reminded again in:"
    durations: tuple[SnoozeOption, ...] = DEFAULT_SNOOZE_OPTIONS


@dataclass(frozen=True)
class TextOption:
    enabled: bool = False
    value: str = ""


@dataclass(frozen=True)
class DeadlineOption:
    enabled: bool = False
    label: str = "Your deadline is:"
    value: datetime | None = None


@dataclass(frozen=True)
class CustomAudio:
    enabled: bool = False
    speech_text: str = ""


@dataclass(frozen=True)
class TextFields:
    attribution: str = ""
    header: str = ""
    title: str = ""
    body1: str = ""
    body2: str = ""


@dataclass(frozen=True)
class PresenterConfig:
    type: str = "auto"
    url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout_seconds: int = 10


@dataclass(frozen=True)
class Configuration:
    toast_enabled: bool = True
    features: frozenset[Feature] = frozenset()
    target_build_number: int | None = None
    max_uptime_days: int | None = None
    deadline: DeadlineOption = DeadlineOption()
    pending_reboot_check_text: TextOption = TextOption()
    pending_reboot_uptime_text: TextOption = TextOption()
    use_software_center: bool = True
    use_powershell: bool = False
    action_button: ActionButton = ActionButton()
    dismiss_button: DismissButton = DismissButton()
    snooze_button: SnoozeButton = SnoozeButton()
    scenario_style: ScenarioStyle = ScenarioStyle.REMINDER
    text: TextFields = TextFields()
    custom_audio: CustomAudio = CustomAudio()
    logo_image: str | None = None
    hero_image: str | None = None
    recent_deadline_priority: DeadlinePriority = DeadlinePriority.AFTER_DEFAULT
    presenter: PresenterConfig = PresenterConfig()

    def has(self, feature: Feature) -> bool:
        return feature in self.features

    @property
    def app_identity(self) -> AppIdentity:
        """Identity the presenter posts under. Only meaningful once validated."""
        if self.use_powershell and not self.use_software_center:
            return AppIdentity.POWERSHELL
        return AppIdentity.SOFTWARE_CENTER


_TRUE_STRINGS = {"true", "yes", "1", "on"}
_FALSE_STRINGS = {"false", "no", "0", "off", ""}
_DEADLINE_FORMATS = ("%d-%m-%Y %H:%M", "%d-%m-%Y %H:%M:%S", "%d-%m-%Y")

_FEATURE_KEYS = {
    "upgrade_os": Feature.UPGRADE_OS,
    "pending_reboot_uptime": Feature.PENDING_REBOOT_UPTIME,
    "pending_reboot_check": Feature.PENDING_REBOOT_CHECK,
    "recent_deadline_check": Feature.RECENT_DEADLINE_CHECK,
}


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _require_dict(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping")
    return value


def parse_bool(value: Any, name: str, default: bool = False) -> bool:
    """Accept real booleans and the "True"/"False" strings of the legacy markup."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    lowered = str(value).strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(value: Any, name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer")


def _parse_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def parse_deadline(value: Any, name: str = "options.deadline.value") -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DEADLINE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"{name} must be a date, got {value!r}")


def _parse_enum(enum_type, value: Any, name: str, default):
    if value is None or value == "":
        return default
    lowered = str(value).strip().lower()
    for member in enum_type:
        if member.value.lower() == lowered:
            return member
    allowed = ", ".join(member.value for member in enum_type)
    raise ValueError(f"{name} must be one of: {allowed}")


def load_config(path: str) -> Configuration:
    if str(path).lower().endswith(".xml"):
        return load_xml_config(path)

    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    data = _expand_env(raw)
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return config_from_dict(data)


def config_from_dict(data: dict[str, Any]) -> Configuration:
    toast_raw = _require_dict(data.get("toast"), "toast")
    features_raw = _require_dict(data.get("features"), "features")
    options = _require_dict(data.get("options"), "options")
    text_raw = _require_dict(data.get("text"), "text")

    unknown = set(features_raw) - set(_FEATURE_KEYS)
    if unknown:
        raise ValueError(f"features has unknown keys: {', '.join(sorted(unknown))}")
    features = frozenset(
        feature
        for key, feature in _FEATURE_KEYS.items()
        if parse_bool(features_raw.get(key), f"features.{key}")
    )

    deadline_raw = _require_dict(options.get("deadline"), "options.deadline")
    app_raw = _require_dict(options.get("app"), "options.app")
    action_raw = _require_dict(options.get("action_button"), "options.action_button")
    dismiss_raw = _require_dict(options.get("dismiss_button"), "options.dismiss_button")
    snooze_raw = _require_dict(options.get("snooze_button"), "options.snooze_button")
    audio_raw = _require_dict(options.get("custom_audio"), "options.custom_audio")
    uptime_text_raw = _require_dict(
        options.get("pending_reboot_uptime_text"), "options.pending_reboot_uptime_text"
    )
    check_text_raw = _require_dict(
        options.get("pending_reboot_check_text"), "options.pending_reboot_check_text"
    )

    return Configuration(
        toast_enabled=parse_bool(toast_raw.get("enabled"), "toast.enabled", default=True),
        features=features,
        target_build_number=_parse_int(options.get("target_build"), "options.target_build"),
        max_uptime_days=_parse_int(options.get("max_uptime_days"), "options.max_uptime_days"),
        deadline=DeadlineOption(
            enabled=parse_bool(deadline_raw.get("enabled"), "options.deadline.enabled"),
            label=_parse_str(text_raw.get("deadline"), DeadlineOption.label),
            value=parse_deadline(deadline_raw.get("value")),
        ),
        pending_reboot_check_text=TextOption(
            enabled=parse_bool(check_text_raw.get("enabled"), "options.pending_reboot_check_text.enabled"),
            value=_parse_str(text_raw.get("pending_reboot_check")),
        ),
        pending_reboot_uptime_text=TextOption(
            enabled=parse_bool(uptime_text_raw.get("enabled"), "options.pending_reboot_uptime_text.enabled"),
            value=_parse_str(text_raw.get("pending_reboot_uptime")),
        ),
        use_software_center=parse_bool(
            app_raw.get("software_center"), "options.app.software_center", default=True
        ),
        use_powershell=parse_bool(app_raw.get("powershell"), "options.app.powershell"),
        action_button=ActionButton(
            enabled=parse_bool(action_raw.get("enabled"), "options.action_button.enabled", default=True),
            label=_parse_str(text_raw.get("action_button"), ActionButton.label),
            target=_parse_str(action_raw.get("action"), ActionButton.target),
        ),
        dismiss_button=DismissButton(
            enabled=parse_bool(dismiss_raw.get("enabled"), "options.dismiss_button.enabled", default=True),
            label=_parse_str(text_raw.get("dismiss_button"), DismissButton.label),
        ),
        snooze_button=SnoozeButton(
            enabled=parse_bool(snooze_raw.get("enabled"), "options.snooze_button.enabled"),
            label=_parse_str(text_raw.get("snooze_button"), SnoozeButton.label),
            prompt=_parse_str(text_raw.get("snooze_prompt"), SnoozeButton.prompt),
        ),
        scenario_style=_parse_enum(
            ScenarioStyle, toast_raw.get("scenario"), "toast.scenario", ScenarioStyle.REMINDER
        ),
        text=TextFields(
            attribution=_parse_str(text_raw.get("attribution")),
            header=_parse_str(text_raw.get("header")),
            title=_parse_str(text_raw.get("title")),
            body1=_parse_str(text_raw.get("body1")),
            body2=_parse_str(text_raw.get("body2")),
        ),
        custom_audio=CustomAudio(
            enabled=parse_bool(audio_raw.get("enabled"), "options.custom_audio.enabled"),
            speech_text=_parse_str(text_raw.get("custom_audio")),
        ),
        logo_image=_optional_str(options.get("logo_image")),
        hero_image=_optional_str(options.get("hero_image")),
        recent_deadline_priority=_parse_enum(
            DeadlinePriority,
            options.get("recent_deadline_priority"),
            "options.recent_deadline_priority",
            DeadlinePriority.AFTER_DEFAULT,
        ),
        presenter=_load_presenter(_require_dict(data.get("presenter"), "presenter")),
    )


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _load_presenter(raw: dict[str, Any]) -> PresenterConfig:
    presenter_type = str(raw.get("type", "auto")).lower()
    if presenter_type not in {"auto", "windows", "desktop", "webhook"}:
        raise ValueError("presenter.type must be one of: auto, windows, desktop, webhook")
    headers = _require_dict(raw.get("headers"), "presenter.headers")
    url = _optional_str(raw.get("url"))
    if presenter_type == "webhook" and not url:
        raise ValueError("presenter.url is required for the webhook presenter")
    timeout = _parse_int(raw.get("timeout_seconds"), "presenter.timeout_seconds")
    return PresenterConfig(
        type=presenter_type,
        url=url,
        headers={str(k): str(v) for k, v in headers.items()},
        timeout_seconds=timeout if timeout is not None else 10,
    )


# Legacy markup: <Configuration> with Feature/Option/Text children keyed by Name.
_XML_FEATURES = {
    "Toast": "toast",
    "UpgradeOS": "upgrade_os",
    "PendingRebootUptime": "pending_reboot_uptime",
    "PendingRebootCheck": "pending_reboot_check",
    "RecentDeadlineCheck": "recent_deadline_check",
}

_XML_TEXTS = {
    "AttributionText": "attribution",
    "HeaderText": "header",
    "TitleText": "title",
    "BodyText1": "body1",
    "BodyText2": "body2",
    "ActionButton": "action_button",
    "DismissButton": "dismiss_button",
    "SnoozeButton": "snooze_button",
    "SnoozeText": "snooze_prompt",
    "DeadlineText": "deadline",
    "PendingRebootUptimeText": "pending_reboot_uptime",
    "PendingRebootCheckText": "pending_reboot_check",
    "CustomAudioTextToSpeech": "custom_audio",
}

_XML_TOGGLES = {
    "PendingRebootUptimeText": "pending_reboot_uptime_text",
    "PendingRebootCheckText": "pending_reboot_check_text",
    "ActionButton": "action_button",
    "DismissButton": "dismiss_button",
    "SnoozeButton": "snooze_button",
    "CustomAudio": "custom_audio",
}


def load_xml_config(path: str) -> Configuration:
    with open(path, "r", encoding="utf-8") as handle:
        root = ET.fromstring(handle.read())
    return config_from_dict(_xml_to_dict(root))


def _xml_to_dict(root: ET.Element) -> dict[str, Any]:
    if root.tag != "Configuration":
        raise ValueError("XML config root must be <Configuration>")

    toast: dict[str, Any] = {}
    features: dict[str, Any] = {}
    options: dict[str, Any] = {}
    text: dict[str, Any] = {}

    for element in root:
        name = element.get("Name", "")
        if element.tag == "Feature":
            key = _XML_FEATURES.get(name)
            if key == "toast":
                toast["enabled"] = element.get("Enabled")
            elif key:
                features[key] = element.get("Enabled")
        elif element.tag == "Option":
            _xml_option(name, element, toast, options)
        elif element.tag == "Text":
            key = _XML_TEXTS.get(name)
            if key:
                text[key] = (element.text or "").strip()

    return {"toast": toast, "features": features, "options": options, "text": text}


def _xml_option(name: str, element: ET.Element, toast: dict[str, Any], options: dict[str, Any]) -> None:
    if name in _XML_TOGGLES:
        options.setdefault(_XML_TOGGLES[name], {})["enabled"] = element.get("Enabled")
    elif name == "TargetOS":
        options["target_build"] = element.get("Build")
    elif name == "MaxUptimeDays":
        options["max_uptime_days"] = element.get("Value")
    elif name == "Deadline":
        options["deadline"] = {"enabled": element.get("Enabled"), "value": element.get("Value")}
    elif name == "UseSoftwareCenterApp":
        options.setdefault("app", {})["software_center"] = element.get("Enabled")
    elif name == "UsePowershellApp":
        options.setdefault("app", {})["powershell"] = element.get("Enabled")
    elif name == "Action":
        options.setdefault("action_button", {})["action"] = element.get("Value")
    elif name == "Scenario":
        toast["scenario"] = element.get("Type")
    elif name == "LogoImageName":
        options["logo_image"] = element.get("Value")
    elif name == "HeroImageName":
        options["hero_image"] = element.get("Value")
    elif name == "RecentDeadlinePriority":
        options["recent_deadline_priority"] = element.get("Value")
