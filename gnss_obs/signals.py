"""Satellite systems and carrier frequencies."""

from __future__ import annotations

from enum import Enum

LIGHT_SPEED_MPS = 299_792_458.0


class SatelliteSystem(str, Enum):
    """GNSS constellations, valued by their RINEX system letter."""

    GPS = "G"
    GAL = "E"
    GLO = "R"
    BDS = "C"
    QZSS = "J"
    IRNSS = "I"
    SBAS = "S"


# Relative error factors per constellation (RTKLIB EFACT_*).
SYSTEM_ERROR_FACTORS: dict[SatelliteSystem, float] = {
    SatelliteSystem.GPS: 1.0,
    SatelliteSystem.GAL: 1.0,
    SatelliteSystem.GLO: 1.5,
    SatelliteSystem.BDS: 1.0,
    SatelliteSystem.QZSS: 1.0,
    SatelliteSystem.IRNSS: 1.5,
    SatelliteSystem.SBAS: 3.0,
}

_GLONASS_CHANNEL_SPACING_HZ = {
    "R01": 0.5625e6,
    "R02": 0.4375e6,
}

_CARRIER_HZ = {
    "G01": 1575.42e6,
    "G02": 1227.60e6,
    "G05": 1176.45e6,
    "E01": 1575.42e6,
    "E05": 1176.45e6,
    "E06": 1278.75e6,
    "E07": 1207.14e6,
    "E08": 1191.795e6,
    "R01": 1602.0e6,
    "R02": 1246.0e6,
    "R03": 1202.025e6,
    "B01": 1575.42e6,
    "B02": 1561.098e6,
    "B05": 1176.45e6,
    "B06": 1268.52e6,
    "B07": 1207.14e6,
    "J01": 1575.42e6,
    "J02": 1227.60e6,
    "J05": 1176.45e6,
    "J06": 1278.75e6,
    "I05": 1176.45e6,
    "I09": 2492.028e6,
    "S01": 1575.42e6,
    "S05": 1176.45e6,
}

L1_FREQUENCY_HZ = _CARRIER_HZ["G01"]


class Frequency(str, Enum):
    """Carrier frequencies, valued by system letter and RINEX band number.

    BeiDou uses ``B`` instead of its system letter ``C`` to keep the value
    distinct from the constellation code.
    """

    G01 = "G01"  # GPS L1
    G02 = "G02"  # GPS L2
    G05 = "G05"  # GPS L5
    E01 = "E01"  # Galileo E1
    E05 = "E05"  # Galileo E5a
    E06 = "E06"  # Galileo E6
    E07 = "E07"  # Galileo E5b
    E08 = "E08"  # Galileo E5 AltBOC
    R01 = "R01"  # GLONASS G1 (FDMA)
    R02 = "R02"  # GLONASS G2 (FDMA)
    R03 = "R03"  # GLONASS G3
    B01 = "B01"  # BeiDou B1C
    B02 = "B02"  # BeiDou B1I
    B05 = "B05"  # BeiDou B2a
    B06 = "B06"  # BeiDou B3I
    B07 = "B07"  # BeiDou B2b
    J01 = "J01"  # QZSS L1
    J02 = "J02"  # QZSS L2
    J05 = "J05"  # QZSS L5
    J06 = "J06"  # QZSS L6
    I05 = "I05"  # NavIC L5
    I09 = "I09"  # NavIC S
    S01 = "S01"  # SBAS L1
    S05 = "S05"  # SBAS L5

    @property
    def system(self) -> SatelliteSystem:
        letter = self.value[0]
        return SatelliteSystem.BDS if letter == "B" else SatelliteSystem(letter)

    def freq_hz(self, freq_num: int = 0) -> float:
        """Carrier frequency in Hz; ``freq_num`` selects the GLONASS FDMA channel."""

        return _CARRIER_HZ[self.value] + freq_num * _GLONASS_CHANNEL_SPACING_HZ.get(self.value, 0.0)

    def wavelength_m(self, freq_num: int = 0) -> float:
        return LIGHT_SPEED_MPS / self.freq_hz(freq_num)
