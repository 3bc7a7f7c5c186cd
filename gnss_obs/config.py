"""Configuration objects for the observation estimator."""

from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, TypeVar

from gnss_obs.atmos.ionosphere import IonosphereModel
from gnss_obs.atmos.standard_atmosphere import (
    AtmosphereModels,
    HumidityModel,
    PressureModel,
    TemperatureModel,
)
from gnss_obs.atmos.troposphere import MappingFunction, TroposphereModelSelection, ZenithDelayModel
from gnss_obs.meas.error_model import GnssMeasurementErrorModel

E = TypeVar("E", bound=Enum)

_TOP_LEVEL_KEYS = {"ionosphereModel", "troposphereModels", "gnssMeasurementError"}
_TROPO_KEYS = {
    "zhdModel",
    "zwdModel",
    "zhdMappingFunction",
    "zwdMappingFunction",
    "pressureModel",
    "temperatureModel",
    "humidityModel",
}


def _parse_enum(enum_cls: type[E], value: Any, key: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as exc:
        choices = ", ".join(repr(member.value) for member in enum_cls)
        raise ValueError(f"Unknown {key}: {value!r} (expected one of {choices})") from exc


def _warn_unknown(section: str, payload: Mapping[str, Any], known: set[str]) -> None:
    unknown = set(payload) - known
    if unknown:
        warnings.warn(f"Unknown {section} options: {sorted(unknown)}", stacklevel=3)


def troposphere_selection_to_dict(selection: TroposphereModelSelection) -> dict[str, str]:
    return {
        "zhdModel": selection.zhd_model.value,
        "zwdModel": selection.zwd_model.value,
        "zhdMappingFunction": selection.zhd_mapping.value,
        "zwdMappingFunction": selection.zwd_mapping.value,
        "pressureModel": selection.atmosphere.pressure.value,
        "temperatureModel": selection.atmosphere.temperature.value,
        "humidityModel": selection.atmosphere.humidity.value,
    }


def troposphere_selection_from_dict(payload: Mapping[str, Any]) -> TroposphereModelSelection:
    _warn_unknown("troposphereModels", payload, _TROPO_KEYS)
    default = TroposphereModelSelection()
    atmosphere = AtmosphereModels(
        pressure=_parse_enum(PressureModel, payload.get("pressureModel", default.atmosphere.pressure.value), "pressure model"),
        temperature=_parse_enum(
            TemperatureModel, payload.get("temperatureModel", default.atmosphere.temperature.value), "temperature model"
        ),
        humidity=_parse_enum(HumidityModel, payload.get("humidityModel", default.atmosphere.humidity.value), "humidity model"),
    )
    return TroposphereModelSelection(
        zhd_model=_parse_enum(ZenithDelayModel, payload.get("zhdModel", default.zhd_model.value), "ZHD model"),
        zwd_model=_parse_enum(ZenithDelayModel, payload.get("zwdModel", default.zwd_model.value), "ZWD model"),
        zhd_mapping=_parse_enum(
            MappingFunction, payload.get("zhdMappingFunction", default.zhd_mapping.value), "ZHD mapping function"
        ),
        zwd_mapping=_parse_enum(
            MappingFunction, payload.get("zwdMappingFunction", default.zwd_mapping.value), "ZWD mapping function"
        ),
        atmosphere=atmosphere,
    )


@dataclass(frozen=True)
class EstimatorConfig:
    """Correction model selection for the observation estimator."""

    ionosphere_model: IonosphereModel = IonosphereModel.KLOBUCHAR
    troposphere_models: TroposphereModelSelection = field(default_factory=TroposphereModelSelection)
    gnss_measurement_error: GnssMeasurementErrorModel = field(default_factory=GnssMeasurementErrorModel)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ionosphereModel": self.ionosphere_model.value,
            "troposphereModels": troposphere_selection_to_dict(self.troposphere_models),
            "gnssMeasurementError": self.gnss_measurement_error.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "EstimatorConfig":
        """Build a config from the JSON option layout.

        Missing options keep their defaults. Unknown model names raise
        ``ValueError``; unknown option keys only warn.
        """

        _warn_unknown("estimator", payload, _TOP_LEVEL_KEYS)
        kwargs: dict[str, Any] = {}
        if "ionosphereModel" in payload:
            kwargs["ionosphere_model"] = _parse_enum(IonosphereModel, payload["ionosphereModel"], "ionosphere model")
        if "troposphereModels" in payload:
            kwargs["troposphere_models"] = troposphere_selection_from_dict(payload["troposphereModels"])
        if "gnssMeasurementError" in payload:
            kwargs["gnss_measurement_error"] = GnssMeasurementErrorModel.from_dict(payload["gnssMeasurementError"])
        return cls(**kwargs)


def load_estimator_config(path: str | Path) -> EstimatorConfig:
    """Read an :class:`EstimatorConfig` from a JSON file."""

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Estimator config must be a JSON object: {path}")
    return EstimatorConfig.from_dict(payload)


def save_estimator_config(path: str | Path, config: EstimatorConfig) -> None:
    Path(path).write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
