"""Atmospheric correction providers."""

from gnss_obs.atmos.ionosphere import (
    AlphaBeta,
    IonosphereModel,
    IonosphereProvider,
    IonosphericCorrection,
    IonosphericCorrections,
    ModelIonosphere,
    calc_ionospheric_delay,
    iono_error_var,
)
from gnss_obs.atmos.standard_atmosphere import (
    AtmosphereModels,
    HumidityModel,
    PressureModel,
    TemperatureModel,
)
from gnss_obs.atmos.troposphere import (
    MappingFunction,
    ModelTroposphere,
    TroposphereModelSelection,
    TroposphereProvider,
    ZenithDelay,
    ZenithDelayModel,
    calc_tropospheric_delay_and_mapping,
    tropo_error_var,
)

__all__ = [
    "AlphaBeta",
    "AtmosphereModels",
    "HumidityModel",
    "IonosphereModel",
    "IonosphereProvider",
    "IonosphericCorrection",
    "IonosphericCorrections",
    "MappingFunction",
    "ModelIonosphere",
    "ModelTroposphere",
    "PressureModel",
    "TemperatureModel",
    "TroposphereModelSelection",
    "TroposphereProvider",
    "ZenithDelay",
    "ZenithDelayModel",
    "calc_ionospheric_delay",
    "calc_tropospheric_delay_and_mapping",
    "iono_error_var",
    "tropo_error_var",
]
