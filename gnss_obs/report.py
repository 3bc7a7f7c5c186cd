"""Tabular diagnostics and error-budget plots.

pandas and matplotlib are imported lazily so the estimator itself never
depends on them.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

from gnss_obs.meas.error_model import GnssMeasurementErrorModel
from gnss_obs.models import ObservationSet
from gnss_obs.signals import SatelliteSystem

if TYPE_CHECKING:
    import pandas as pd

FRAME_COLUMNS = [
    "signal",
    "sat_sys",
    "sat_num",
    "freq",
    "receiver",
    "obs_type",
    "measurement",
    "estimate",
    "residual",
    "meas_var",
    "elev_deg",
    "az_deg",
    "cn0_dbhz",
    "range_m",
    "tropo_delay_m",
    "iono_delay_m",
    "sagnac_m",
    "sagnac_rate_mps",
]


def observations_to_frame(observations: ObservationSet) -> "pd.DataFrame":
    """Flatten an annotated observation set into one row per observable."""

    import pandas as pd

    rows: list[dict[str, Any]] = []
    for sat_sig_id, signal in sorted(observations.items()):
        for recv, recv_obs in sorted(signal.recv_obs.items()):
            terms = recv_obs.terms
            for obs_type, obs_data in recv_obs.obs.items():
                rows.append(
                    {
                        "signal": str(sat_sig_id),
                        "sat_sys": sat_sig_id.sat_sys.name,
                        "sat_num": sat_sig_id.sat_num,
                        "freq": sat_sig_id.freq.value,
                        "receiver": int(recv),
                        "obs_type": obs_type.value,
                        "measurement": obs_data.measurement,
                        "estimate": obs_data.estimate,
                        "residual": obs_data.measurement - obs_data.estimate,
                        "meas_var": obs_data.meas_var,
                        "elev_deg": recv_obs.elev_deg,
                        "az_deg": recv_obs.az_deg,
                        "cn0_dbhz": recv_obs.cn0_dbhz if recv_obs.cn0_dbhz is not None else float("nan"),
                        "range_m": terms.range_m,
                        "tropo_delay_m": terms.tropo_delay_m,
                        "iono_delay_m": terms.iono_delay_m,
                        "sagnac_m": terms.sagnac_m,
                        "sagnac_rate_mps": terms.sagnac_rate_mps,
                    }
                )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def plot_error_budget(
    error_model: GnssMeasurementErrorModel,
    path: str | Path,
    *,
    systems: Sequence[SatelliteSystem] = (SatelliteSystem.GPS, SatelliteSystem.GLO),
    cn0_dbhz: float = 45.0,
) -> Path:
    """Plot the baseline standard deviations against elevation and save a PNG."""

    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    elevations = np.linspace(1.0, 90.0, 90)
    panels = [
        ("Pseudorange", "m", error_model.psr_meas_error_var),
        ("Carrier", "m", error_model.carrier_meas_error_var),
        ("Doppler", "m/s", error_model.psr_rate_meas_error_var),
    ]

    fig, axes = plt.subplots(len(panels), 1, figsize=(8, 8), sharex=True)
    for ax, (label, unit, var_fn) in zip(axes, panels):
        for sat_sys in systems:
            sigma = [np.sqrt(var_fn(sat_sys, elev, cn0_dbhz)) for elev in elevations]
            ax.plot(elevations, sigma, label=sat_sys.name)
        ax.set_ylabel(f"{label} sigma ({unit})")
        ax.grid(True, linestyle="--", alpha=0.5)
        ax.legend(loc="best")
    axes[-1].set_xlabel("Elevation (deg)")
    fig.suptitle(f"Measurement error model: {error_model.model.value} @ {cn0_dbhz:.0f} dB-Hz")
    fig.tight_layout()
    fig.savefig(target, dpi=150)
    plt.close(fig)
    return target
